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
Translation of a profile and the host context into a docker invocation.
"""
import logging
import os
import posixpath
from typing import Dict, List, Optional

from .. import __version__
from ..errors import HostResolutionError, InvocationError
from ..MANAGERS.environment_manager import EnvironmentFilter
from ..MODELS.host_context import HostContext
from ..MODELS.invocation_plan import InvocationPlan
from ..MODELS.profile import MountLocation, Profile
from ..REGISTRY.registry_client import ImageRegistry
from ..UTILS.path_converter import PathConverter, split_drive, to_slash

LOGGER = logging.getLogger(__name__)

DOCKER_SOCKET = "/var/run/docker.sock"
TEMP_MOUNT_PATH = "/var/runcontainer"
VOLUME_NAME = "runcontainer"
CACHE_FOLDER_NAME = "runcontainer-cache"
ENV_PREFIX = "RUNCONTAINER_"
TEMP_FOLDER_VARIABLE = f"{ENV_PREFIX}TEMP_FOLDER"
NAME_OPTION = "--name"
AUTO_REMOVE_OPTION = "--rm"


def runtime_mount_args() -> List[str]:
    """Arguments giving the container access to the host docker daemon."""
    return ["-v", f"{DOCKER_SOCKET}:{DOCKER_SOCKET}"]


class InvocationBuilder:
    """
    Builds the docker run command line for a profile.

    The only daemon request is the inspection of the image user when the
    home folder is persisted in a named volume.
    """
    def __init__(self, registry: Optional[ImageRegistry] = None, version: str = __version__):
        """
        Initializes the builder.

        :param registry: Daemon client, created on demand when not given.
        :param version: Version reported to the container.
        """
        self.registry = registry
        self.version = version

    def build(self, profile: Profile, host: HostContext) -> InvocationPlan:
        """
        Builds the invocation plan.

        :param profile: The resolved profile.
        :param host: The host context.
        :return: The docker arguments, image, command and environment overlay.
        :raises HostResolutionError: If a required host fact is missing.
        :raises RegistryError: If the image user cannot be inspected.
        :raises InvocationError: If the temp mount location is unknown.
        """
        converter = PathConverter.for_host(host)

        drive, path = split_drive(host.cwd, host.platform)
        root_folder = path.split("/")[0]
        launch_folder = "/" + path.replace(root_folder, profile.mount_point, 1)
        image_name = profile.image_name

        args = ["run"]
        if profile.interactive:
            args.append("-it")
        args.extend([
            "-v", f"{converter.convert(drive)}{root_folder}:/{profile.mount_point}",
            "-w", launch_folder,
        ])

        if profile.with_runtime_mount:
            args.extend(runtime_mount_args())

        # Files written by containers on windows are already owned by the caller
        if profile.with_current_user and not host.is_windows:
            if host.uid is None or host.gid is None:
                raise HostResolutionError("Unable to determine the uid and gid of the current user")
            args.append(f"--user={host.uid}:{host.gid}")

        args.extend(self._home_args(profile, host, converter))

        for option in profile.extra_options:
            args.extend(option.split())

        environment = dict(profile.environment)
        args.extend(self._temp_args(profile, host, converter, environment))

        environment.update(self._runcontainer_variables(profile, host, launch_folder))

        # Values reach docker through its own environment, host first, overlay on top
        forwarded = {**host.environ, **environment}
        args.extend(EnvironmentFilter(host.platform).docker_args(forwarded))

        if NAME_OPTION not in args:
            args.append(AUTO_REMOVE_OPTION)

        plan = InvocationPlan(
            args=args,
            image=image_name,
            command=profile.command,
            environment=environment,
            launch_folder=launch_folder,
        )
        LOGGER.debug("Built invocation: %s", plan.command_line)
        return plan

    def _home_args(self, profile: Profile, host: HostContext, converter: PathConverter) -> List[str]:
        if profile.mount_home_directory:
            mounted_home = f"/home/{posixpath.basename(host.home.rstrip('/'))}"
            return [
                "-v", f"{converter.convert(host.home)}:{mounted_home}",
                "-e", f"HOME={mounted_home}",
            ]

        if profile.temp_dir_mount_location == MountLocation.NONE:
            return []

        # Persist the home folder in a volume owned by the user the image runs as
        username = self._image_user(profile) or host.username
        # Windows user names carry their domain (ACME\jsmith), volume names cannot
        username = username.split("\\")[-1]
        username = username.split(":")[0]
        home_path = f"/home/{username}"
        return [
            "-e", f"HOME={home_path}",
            "-v", f"{VOLUME_NAME}-{username}:{home_path}",
        ]

    def _image_user(self, profile: Profile) -> str:
        if self.registry is None:
            self.registry = ImageRegistry()
        return self.registry.configured_user(profile.lookup_name)

    def _temp_args(self,
                   profile: Profile,
                   host: HostContext,
                   converter: PathConverter,
                   environment: Dict[str, str]) -> List[str]:
        location = profile.temp_dir_mount_location
        if location == MountLocation.HOST:
            temp_dir = os.path.realpath(host.temp_dir)
            if not os.path.isdir(temp_dir):
                raise HostResolutionError(f"Unable to resolve the temp directory {host.temp_dir}")

            temp = posixpath.join(to_slash(temp_dir, host.platform), CACHE_FOLDER_NAME)
            temp_drive, temp_folder = split_drive(temp, host.platform)
            if host.is_windows:
                try:
                    os.makedirs(temp, exist_ok=True)
                except OSError as e:
                    raise HostResolutionError(f"Unable to create the temp folder {temp}: {e}") from e
            environment[TEMP_FOLDER_VARIABLE] = posixpath.join(temp_drive, temp_folder)
            return ["-v", f"{converter.convert(temp_drive)}{temp_folder}:{TEMP_MOUNT_PATH}"]

        if location == MountLocation.NONE:
            return []

        if location == MountLocation.VOLUME:
            # docker creates the volume on first use
            return ["-v", f"{VOLUME_NAME}:{TEMP_MOUNT_PATH}"]

        raise InvocationError(f"Unknown mount location '{location}'. Please report a bug.")

    def _runcontainer_variables(self, profile: Profile, host: HostContext, launch_folder: str) -> Dict[str, str]:
        variables = {
            f"{ENV_PREFIX}COMMAND": profile.entry_point,
            f"{ENV_PREFIX}VERSION": self.version,
            f"{ENV_PREFIX}ARGS": " ".join(host.argv),
            f"{ENV_PREFIX}LAUNCH_FOLDER": launch_folder,
            f"{ENV_PREFIX}IMAGE_NAME": profile.image_name,
            f"{ENV_PREFIX}IMAGE": profile.image,
        }
        if profile.image_tag:
            variables[f"{ENV_PREFIX}IMAGE_TAG"] = profile.image_tag
        return variables
