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
Compiles a RunIntent into the arguments of `docker run`.
"""
from typing import List
from ..MODELS.intents import RunIntent, is_pause_container


def generate_run_args(intent: RunIntent) -> List[str]:
    """
    Returns the command line arguments, starting with `run`, that start the
    container described by the intent. Maps are emitted in sorted key order.
    """
    args = ["run"]
    name = intent.container_name or ""

    if name:
        args.extend(["--name", name])

    for host_port in sorted(intent.container_ports):
        args.extend(["--publish", f"{host_port}:{intent.container_ports[host_port]}"])

    if not is_pause_container(name):
        args.extend(["--network", f"container:{intent.container_network or ''}"])

    for key in sorted(intent.secrets):
        args.extend(["--env", f"{key}={intent.secrets[key]}"])

    for key in sorted(intent.env_vars):
        args.extend(["--env", f"{key}={intent.env_vars[key]}"])

    args.append(intent.image_uri)
    args.extend(intent.command)
    return args
