# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Operating systems and architectures reported by docker.
"""

OS_LINUX = "linux"
OS_WINDOWS = "windows"

ARCH_AMD64 = "amd64"
ARCH_X86 = "x86_64"
ARCH_ARM = "arm"
ARCH_ARM64 = "arm64"


def platform_string(os_name: str, arch: str) -> str:
    """
    Formats a platform the way `docker build --platform` expects, e.g. `linux/amd64`.
    """
    return f"{os_name}/{arch}"
