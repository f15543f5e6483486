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
Runs a profile: hooks around a single docker invocation.
"""
import logging
from typing import Optional

import click

from ..errors import HookError
from ..MODELS.host_context import HostContext
from ..MODELS.profile import Profile
from .invocation_builder import InvocationBuilder
from .process_runner import ProcessRunner, exit_status

LOGGER = logging.getLogger(__name__)

WINDOWS_MESSAGE = """
You may have to share your drives with your Docker virtual machine to make them accessible.
On Windows 10+ using Hyper-V to run Docker, simply right click on Docker icon in your tray and
choose "Settings", then go to "Shared Drives" and enable the share for the drives you want to
be accessible to your dockers.
On previous version using VirtualBox, start the VirtualBox application and add shared drives
for all drives you want to make shareable with your dockers.
IMPORTANT, to make your drives accessible to runcontainer, you have to give them uppercase name
corresponding to the drive letter:
\tC:\\ ==> /C
\tD:\\ ==> /D
\t...
\tZ:\\ ==> /Z
"""


class ContainerLauncher:
    """
    Builds the invocation of a profile and runs it between its hooks.
    """
    def __init__(self,
                 builder: Optional[InvocationBuilder] = None,
                 runner: Optional[ProcessRunner] = None):
        """
        :param builder: Invocation builder, a default one if not given.
        :param runner: Process runner, one for the host platform if not given.
        """
        self.builder = builder or InvocationBuilder()
        self.runner = runner

    def execute(self, profile: Profile, host: HostContext) -> int:
        """
        Runs the profile.

        :param profile: The resolved profile.
        :param host: The host context.
        :return: 1 if a hook fails or docker writes to stderr, the docker
                 exit status otherwise.
        """
        plan = self.builder.build(profile, host)
        runner = self.runner or ProcessRunner(host.platform)

        try:
            runner.run_commands(profile.run_before_commands, "before")
        except HookError as e:
            click.echo(str(e), err=True)
            return 1

        returncode, stderr = runner.run(plan, host.environ)
        # Anything on stderr is a failure, even with a zero exit status
        if stderr:
            message = f"{stderr}\n{plan.command_line}"
            if host.is_windows:
                message += WINDOWS_MESSAGE
            click.echo(message, err=True)
            return 1

        try:
            runner.run_commands(profile.run_after_commands, "after")
        except HookError as e:
            click.echo(str(e), err=True)
            return 1

        LOGGER.debug("docker exited with %s", returncode)
        return exit_status(returncode)
