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
Compiles a BuildIntent into the arguments of `docker build`.
"""
from typing import Callable, List, Optional
from ..MODELS.engine_config import is_ci
from ..MODELS.intents import BuildIntent, image_name
from ..errors import EmptyTagsError


def generate_build_args(intent: BuildIntent,
                        lookup_env: Callable[[str], Optional[str]]) -> List[str]:
    """
    Returns the command line arguments, starting with `build`, that build the
    image described by the intent.

    Tags keep the caller's order since the first one is later used to look up
    the image digest. Build args and labels are emitted in sorted key order so
    the output is stable for identical inputs.

    Args:
        intent (BuildIntent): What to build.
        lookup_env (Callable): Reads an environment variable, e.g. os.environ.get.

    Returns:
        List[str]: Arguments for the docker executable.

    Raises:
        EmptyTagsError: If the intent has no tags.
    """
    if not intent.tags:
        raise EmptyTagsError(intent.uri)

    args = ["build"]

    for tag in intent.tags:
        args.extend(["-t", image_name(intent.uri, tag)])

    for image in intent.cache_from:
        args.extend(["--cache-from", image])

    if intent.target:
        args.extend(["--target", intent.target])

    if intent.platform:
        args.extend(["--platform", intent.platform])

    # Plain progress output in CI.
    if is_ci(lookup_env):
        args.extend(["--progress", "plain"])

    for key in sorted(intent.args):
        args.extend(["--build-arg", f"{key}={intent.args[key]}"])

    for key in sorted(intent.labels):
        args.extend(["--label", f"{key}={intent.labels[key]}"])

    args.extend([intent.context_dir, "-f", intent.dockerfile])
    return args
