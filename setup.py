from setuptools import setup, find_namespace_packages

setup(
    name="dockerengine",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["dockerengine", "dockerengine.*"]),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "pydantic>=2.0",
        "click>=8.0",
        "psutil>=5.9",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "dockerengine=dockerengine.CLI.main:main",
        ],
    },
)
