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
Selection of the host environment variables forwarded into the container.
"""
import re
from typing import Dict, List, Mapping

from ..UTILS.path_converter import WINDOWS

# Shell and session variables that only make sense on the host
SESSION_VARIABLES = frozenset({
    "_", "PWD", "PS1", "OLDPWD", "TMPDIR",
    "PROMPT", "SHELL", "SH", "ZSH", "HOME",
    "LANG", "LC_CTYPE", "DISPLAY", "TERM",
})

_DRIVE_PATH = re.compile(r"[A-Z]:\\")


class EnvironmentFilter:
    """
    Decides which host environment variables are forwarded with '-e NAME'.

    The filter is stateless: the same variables always give the same result.
    """
    def __init__(self, platform: str):
        """
        :param platform: Host platform name.
        """
        self.platform = platform
        self.path_separator = "\\" if platform == WINDOWS else "/"

    def retain(self, name: str, value: str) -> bool:
        """
        Tells whether a variable should be forwarded into the container.

        :param name: Variable name.
        :param value: Variable value.
        :return: False for empty names, host path lists, windows specific
                 values and shell session variables.
        """
        name = name.strip()
        upper = name.upper()
        if not name:
            return False

        # Path lists pointing at host folders are meaningless in the container
        if "PATH" in upper and value.startswith(self.path_separator):
            return False

        if self.platform == WINDOWS and (_DRIVE_PATH.search(value.upper()) or "WIN" in upper):
            return False

        return name not in SESSION_VARIABLES

    def filter(self, environ: Mapping[str, str]) -> Dict[str, str]:
        """
        Keeps the variables that should be forwarded.

        :param environ: Variables to check.
        :return: The retained variables, sorted by name.
        """
        return {name: environ[name] for name in sorted(environ) if self.retain(name, environ[name])}

    def docker_args(self, environ: Mapping[str, str]) -> List[str]:
        """
        Builds the '-e NAME' pairs for the retained variables.

        Docker reads each value from its own environment.
        """
        args = []
        for name in self.filter(environ):
            args.extend(["-e", name])
        return args
