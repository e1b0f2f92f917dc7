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
Shared fixtures: a command runner that records invocations and replays
scripted outcomes, and an engine configuration detached from the host.
"""
from dataclasses import dataclass
from typing import List, Optional

import pytest

from dockerengine.MODELS.engine_config import EngineConfig
from dockerengine.RUNNERS.command_runner import CommandRunner
from dockerengine.errors import CommandFailed


@dataclass
class Outcome:
    """What the fake docker prints and whether it fails."""
    stdout: str = ""
    error: Optional[Exception] = None


@dataclass
class Invocation:
    name: str
    args: List[str]
    stdin: Optional[str]
    stdout: object
    stderr: object
    cancel: object


class RecordingRunner(CommandRunner):
    """
    CommandRunner that never spawns anything. Outcomes are consumed in order;
    once the script is exhausted every command succeeds silently.
    """
    def __init__(self, *outcomes: Outcome):
        self.outcomes = list(outcomes)
        self.calls: List[Invocation] = []

    def run_with_cancellation(self, cancel, name, args, stdin=None, stdout=None, stderr=None):
        self.calls.append(Invocation(name, list(args), stdin, stdout, stderr, cancel))
        outcome = self.outcomes.pop(0) if self.outcomes else Outcome()
        if outcome.stdout and stdout is not None:
            stdout.write(outcome.stdout)
        if outcome.error is not None:
            raise outcome.error

    @property
    def args(self) -> List[List[str]]:
        return [call.args for call in self.calls]


def failure(stderr: str = "", exit_code: int = 1) -> Outcome:
    return Outcome(error=CommandFailed("docker", [], exit_code=exit_code, stderr=stderr))


def make_config(home_path: str = "", env: Optional[dict] = None, docker_found: bool = True) -> EngineConfig:
    env = env or {}
    return EngineConfig(
        home_path=home_path,
        lookup_env=env.get,
        which=lambda name: f"/usr/bin/{name}" if docker_found else None,
    )


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def ci_config():
    return make_config(env={"CI": "true"})
