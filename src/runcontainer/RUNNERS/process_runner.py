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
Execution of hook scripts and of the docker process.
"""
import logging
import os
import re
import shlex
import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple

from ..errors import HookError, InvocationError
from ..MODELS.invocation_plan import InvocationPlan
from ..UTILS.path_converter import WINDOWS

LOGGER = logging.getLogger(__name__)

# Lines using any of these need a shell
_SHELL_SYNTAX = re.compile(r"[|&;<>()$`*?\[\]{}~\n]")


@contextmanager
def script_command(script: str, platform: str) -> Iterator[List[str]]:
    """
    Turns a hook script into a command line.

    A single line without shell syntax whose first word is an executable
    on the PATH runs directly. Anything else is written to a temporary
    script file that is removed when the context exits, whatever happens
    inside it.

    :param script: The hook script.
    :param platform: Host platform name.
    :return: The command line to run.
    """
    stripped = script.strip()
    if not _SHELL_SYNTAX.search(stripped) and not stripped.startswith("#!"):
        try:
            tokens = shlex.split(stripped)
        except ValueError:
            tokens = []
        if tokens and shutil.which(tokens[0]):
            yield tokens
            return

    suffix = ".bat" if platform == WINDOWS else ".sh"
    fd, path = tempfile.mkstemp(prefix="runcontainer-", suffix=suffix)
    try:
        with os.fdopen(fd, "w") as f:
            f.write(script)
        if platform == WINDOWS:
            yield ["cmd", "/c", path]
        elif stripped.startswith("#!"):
            os.chmod(path, 0o700)
            yield [path]
        else:
            yield ["sh", path]
    finally:
        os.remove(path)


def exit_status(returncode: int) -> int:
    """Maps a Popen return code to a shell style exit status."""
    if returncode < 0:
        return 128 - returncode
    return returncode


class ProcessRunner:
    """
    Runs hook scripts and the docker process, attached to the terminal.
    """
    def __init__(self, platform: str):
        """
        Initializes the process runner.

        Args:
            platform (str): Host platform name, selects the script shell.
        """
        self.platform = platform

    def run_commands(self, commands: Sequence[str], phase: str):
        """
        Runs hook scripts in order, stopping at the first failure.

        Args:
            commands (Sequence[str]): Scripts to run.
            phase (str): 'before' or 'after', for the error message.

        Raises:
            HookError: If a script cannot be started or exits with a non zero status.
        """
        for script in commands:
            try:
                with script_command(script, self.platform) as command:
                    LOGGER.info("Running %s command: %s", phase, " ".join(command))
                    subprocess.run(command, check=True, shell=False)
            except (OSError, subprocess.CalledProcessError) as e:
                raise HookError(phase, commands, e) from e

    def run(self, plan: InvocationPlan, base_environ: Optional[Mapping[str, str]] = None) -> Tuple[int, str]:
        """
        Runs docker and waits for it.

        stdin and stdout are inherited, stderr is captured.

        Args:
            plan (InvocationPlan): The invocation to run.
            base_environ (Optional[Mapping[str, str]]): Environment the overlay is
                applied on. Defaults to the current process environment.

        Returns:
            Tuple[int, str]: The return code and the captured stderr.

        Raises:
            InvocationError: If docker cannot be started.
        """
        env = dict(os.environ if base_environ is None else base_environ)
        env.update(plan.environment)

        LOGGER.info("Starting command: %s", plan.command_line)
        try:
            process = subprocess.Popen(
                plan.argv,
                env=env,
                stderr=subprocess.PIPE,
                text=True,
                shell=False
            )
        except OSError as e:
            raise InvocationError(f"Unable to start {plan.argv[0]}: {e}") from e

        _, stderr = process.communicate()
        return process.returncode, stderr or ""
