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
Models for runcontainer profiles and the configuration file that holds them.
"""
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import ConfigurationError
from ..REGISTRY.image_reference import canonical_name, lookup_name

DEFAULT_MOUNT_POINT = "current_sources"
DEFAULT_PROFILE_NAME = "default"


class MountLocation(str, Enum):
    """
    Where the temporary cache folder of the container lives.
    """
    NONE = "none"
    HOST = "host"
    VOLUME = "volume"


class Profile(BaseModel):
    """
    A single named entry of the configuration file.

    Describes the image to run and how the host folders, user and
    environment are mapped into the container. Keys in the configuration
    file use the dashed aliases; the Python field names are accepted too.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    image: str = Field("", alias="docker-image")
    image_tag: str = Field("", alias="docker-image-tag")
    entry_point: str = Field("", alias="entry-point")
    mount_point: str = Field(DEFAULT_MOUNT_POINT, alias="mount-point")

    interactive: bool = Field(False, alias="docker-interactive")
    with_runtime_mount: bool = Field(False, alias="with-docker-mount")
    with_current_user: bool = Field(False, alias="with-current-user")
    mount_home_directory: bool = Field(False, alias="mount-home-directory")

    extra_options: List[str] = Field(default_factory=list, alias="docker-options")
    temp_dir_mount_location: MountLocation = Field(MountLocation.HOST, alias="temp-dir-mount-location")
    environment: Dict[str, str] = Field(default_factory=dict, alias="environment")

    run_before_commands: List[str] = Field(default_factory=list, alias="run-before-commands")
    run_after_commands: List[str] = Field(default_factory=list, alias="run-after-commands")

    @field_validator("image", "image_tag", "entry_point", mode="before")
    @classmethod
    def _empty_string(cls, value):
        return "" if value is None else value

    @field_validator("mount_point", mode="before")
    @classmethod
    def _default_mount_point(cls, value):
        return value or DEFAULT_MOUNT_POINT

    @field_validator("temp_dir_mount_location", mode="before")
    @classmethod
    def _default_mount_location(cls, value):
        return value or MountLocation.HOST

    @field_validator("extra_options", "run_before_commands", "run_after_commands", mode="before")
    @classmethod
    def _empty_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("environment", mode="before")
    @classmethod
    def _string_environment(cls, value):
        if value is None:
            return {}
        # YAML happily produces numbers and booleans for unquoted values
        return {str(key): "" if val is None else str(val) for key, val in value.items()}

    @property
    def image_name(self) -> str:
        """Image reference passed to docker run."""
        return canonical_name(self.image, self.image_tag)

    @property
    def lookup_name(self) -> str:
        """Image reference used to query the daemon, with an explicit tag."""
        return lookup_name(self.image_name)

    @property
    def command(self) -> List[str]:
        """The entry point split on whitespace."""
        return self.entry_point.split()


class ProfileSet(BaseModel):
    """
    The whole configuration file: named profiles and the default one.
    """
    model_config = ConfigDict(populate_by_name=True)

    default_profile: str = Field("", alias="default-profile")
    configs: Dict[str, Profile] = Field(default_factory=dict, alias="configs")

    @field_validator("default_profile", mode="before")
    @classmethod
    def _empty_default(cls, value):
        return value or ""

    @field_validator("configs", mode="before")
    @classmethod
    def _empty_configs(cls, value):
        return value or {}

    def resolve(self, name: Optional[str] = None) -> Tuple[str, Profile]:
        """
        Looks up a profile by name.

        Falls back to the default profile of the file, then to 'default'.

        :param name: Requested profile name, may be empty.
        :return: The selected name and its profile.
        :raises ConfigurationError: If no profile has that name.
        """
        selected = name or self.default_profile or DEFAULT_PROFILE_NAME
        try:
            return selected, self.configs[selected]
        except KeyError:
            available = ", ".join(sorted(self.configs)) or "none"
            raise ConfigurationError(
                f"Profile '{selected}' not found in configuration (available: {available})"
            ) from None

    def to_document(self) -> dict:
        """Serializes the set using the configuration file keys."""
        return self.model_dump(by_alias=True, mode="json")
