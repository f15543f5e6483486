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
Exceptions raised by runcontainer.

Every failure the tool can report is a RuncontainerError. The command line
interface is the only place that catches them; it prints the message and
exits with status 1.
"""


class RuncontainerError(Exception):
    """Base class for all runcontainer failures."""


class ConfigurationError(RuncontainerError):
    """The configuration file is missing, malformed or lacks the profile."""


class HostResolutionError(RuncontainerError):
    """The host working directory, user or temp folder cannot be resolved."""


class RegistryError(RuncontainerError):
    """The docker daemon cannot be reached or refused a request."""


class HookError(RuncontainerError):
    """A run-before or run-after command failed."""

    def __init__(self, phase: str, commands, cause: Exception):
        self.phase = phase
        self.commands = list(commands)
        self.cause = cause
        super().__init__(f"run {phase} command failed: {self.commands}\n{cause}")


class InvocationError(RuncontainerError):
    """The profile cannot be translated into a docker invocation."""


class VersionError(RuncontainerError):
    """A version or version range cannot be parsed."""
