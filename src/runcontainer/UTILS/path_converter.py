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
Conversion of host paths into the syntax expected by docker volume flags.
"""
import ntpath
from typing import Mapping, Tuple

WINDOWS = "windows"
LEGACY_MACHINE_MARKER = "DOCKER_MACHINE_NAME"


def to_slash(path: str, platform: str) -> str:
    """Replaces windows separators with forward slashes."""
    if platform == WINDOWS:
        return path.replace("\\", "/")
    return path


def split_drive(path: str, platform: str) -> Tuple[str, str]:
    """
    Splits a slash separated path into its drive and the rest.

    :param path: Forward slash path, e.g. 'C:/work/project' or '/home/me'.
    :param platform: Host platform name.
    :return: The drive with its trailing slash ('C:/' or '/') and the
             remainder without a leading slash.
    """
    drive = ntpath.splitdrive(path)[0] if platform == WINDOWS else ""
    drive = f"{drive}/"
    if path.startswith(drive):
        return drive, path[len(drive):]
    return drive, path


class PathConverter:
    """
    Rewrites host paths for the volume mount flag.

    Old windows hosts running docker through docker-machine and VirtualBox
    only see the drives shared as '/C', '/D', ... so 'C:/work' must be
    given as '/C/work'. Everywhere else paths are passed unchanged.
    """
    def __init__(self, platform: str, environ: Mapping[str, str]):
        """
        :param platform: Host platform name.
        :param environ: Host environment, checked for the docker-machine marker.
        """
        self.legacy = platform == WINDOWS and bool(environ.get(LEGACY_MACHINE_MARKER))

    @classmethod
    def for_host(cls, host) -> "PathConverter":
        return cls(host.platform, host.environ)

    def convert(self, path: str) -> str:
        """
        Converts a path for the volume flag.

        :param path: Host path, forward slash separated.
        :return: '/X' prefixed path in legacy mode, the path itself otherwise.
        """
        if not self.legacy or len(path) < 2 or path[1] != ":":
            return path
        return f"/{path[0].upper()}{path[2:]}"
