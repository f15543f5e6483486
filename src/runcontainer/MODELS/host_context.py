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
Snapshot of the host facts a container invocation depends on.
"""
import getpass
import os
import sys
import tempfile
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..errors import HostResolutionError
from ..UTILS.path_converter import WINDOWS, to_slash


def current_platform() -> str:
    """Platform name: 'windows', 'darwin' or the raw sys.platform value."""
    if sys.platform.startswith("win"):
        return WINDOWS
    return sys.platform


@dataclass
class HostContext:
    """
    The host side of a container invocation.

    Paths are forward slash separated. uid and gid are None on platforms
    without POSIX user ids.
    """

    platform: str
    cwd: str
    home: str
    username: str
    temp_dir: str
    uid: Optional[int] = None
    gid: Optional[int] = None
    environ: Dict[str, str] = field(default_factory=dict)
    argv: List[str] = field(default_factory=list)

    @property
    def is_windows(self) -> bool:
        return self.platform == WINDOWS

    @classmethod
    def detect(cls, argv: Optional[List[str]] = None) -> "HostContext":
        """
        Reads the host context of the running process.

        :param argv: Command line to record, defaults to sys.argv.
        :raises HostResolutionError: If the working directory, user or
                                     temp folder cannot be determined.
        """
        platform = current_platform()

        try:
            cwd = os.path.realpath(os.getcwd())
        except OSError as e:
            raise HostResolutionError(f"Unable to resolve the working directory: {e}") from e

        try:
            username = getpass.getuser()
        except (KeyError, OSError, ImportError) as e:
            raise HostResolutionError(f"Unable to determine the current user: {e}") from e

        home = os.path.expanduser("~")
        if home == "~":
            raise HostResolutionError("Unable to determine the home directory of the current user")

        try:
            temp_dir = tempfile.gettempdir()
        except (FileNotFoundError, OSError) as e:
            raise HostResolutionError(f"Unable to resolve the temp directory: {e}") from e

        return cls(
            platform=platform,
            cwd=to_slash(cwd, platform),
            home=to_slash(home, platform),
            username=username,
            temp_dir=temp_dir,
            uid=os.getuid() if hasattr(os, "getuid") else None,
            gid=os.getgid() if hasattr(os, "getgid") else None,
            environ=dict(os.environ),
            argv=list(sys.argv if argv is None else argv),
        )
