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
Discovery and parsing of runcontainer configuration files.
"""
import json
import os
from typing import List, Optional, Tuple

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from ..MODELS.profile import DEFAULT_PROFILE_NAME, MountLocation, Profile, ProfileSet

CONFIG_BASENAME = ".runcontainer"
CONFIG_FILE_NAME = f"{CONFIG_BASENAME}.json"
CONFIG_EXTENSIONS = (".json", ".yaml", ".yml")
YAML_EXTENSIONS = (".yaml", ".yml")


def scaffold_profile_set() -> ProfileSet:
    """
    The configuration written by 'runcontainer init'.
    """
    return ProfileSet(
        default_profile=DEFAULT_PROFILE_NAME,
        configs={
            DEFAULT_PROFILE_NAME: Profile(
                image="iac",
                image_tag="latest",
                entry_point="/bin/bash",
                mount_point="current_sources",
                interactive=True,
                with_runtime_mount=True,
                with_current_user=True,
                mount_home_directory=True,
                temp_dir_mount_location=MountLocation.HOST,
            )
        },
    )


class ConfigParser:
    """
    Parser for .runcontainer.json and .runcontainer.yaml files.
    """
    def __init__(self, search_paths: Optional[List[str]] = None):
        """
        Initializes the parser.

        :param search_paths: Folders searched for a configuration file, in
                             order. Defaults to the working and home directories.
        """
        if search_paths is None:
            search_paths = [os.getcwd(), os.path.expanduser("~")]
        self.search_paths = search_paths

    def find(self, config_file: Optional[str] = None) -> str:
        """
        Locates the configuration file.

        :param config_file: Explicit path, used as is when given.
        :return: Path of the configuration file.
        :raises ConfigurationError: If no configuration file exists.
        """
        if config_file:
            if not os.path.isfile(config_file):
                raise ConfigurationError(f"Unable to find config file {config_file}")
            return config_file

        for folder in self.search_paths:
            for extension in CONFIG_EXTENSIONS:
                candidate = os.path.join(folder, f"{CONFIG_BASENAME}{extension}")
                if os.path.isfile(candidate):
                    return candidate
        raise ConfigurationError("Unable to find config file to use")

    def parse(self, config_path: str) -> ProfileSet:
        """
        Parses a configuration file from a path.

        :param config_path: Path to the configuration file.
        :return: Parsed configuration.
        """
        try:
            with open(config_path, 'r') as f:
                content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Unable to read config file {config_path}: {e}") from e
        return self.parse_from_string(content, is_yaml=config_path.lower().endswith(YAML_EXTENSIONS))

    def parse_from_string(self, content: str, is_yaml: bool = False) -> ProfileSet:
        """
        Parses a configuration from a string.

        :param content: JSON or YAML document.
        :param is_yaml: Whether the content is YAML rather than JSON.
        :return: Parsed configuration.
        :raises ConfigurationError: If the document is malformed.
        """
        try:
            data = yaml.safe_load(content) if is_yaml else json.loads(content)
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Unable to deserialize configuration file: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("Unable to deserialize configuration file: expected an object")

        try:
            return ProfileSet.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration file: {e}") from e

    def load_profile(self,
                     config_file: Optional[str] = None,
                     profile_name: Optional[str] = None) -> Tuple[str, str, Profile]:
        """
        Finds, parses and resolves a profile in one go.

        :param config_file: Explicit configuration path.
        :param profile_name: Requested profile, the file default if empty.
        :return: The configuration path, the profile name and the profile.
        """
        config_path = self.find(config_file)
        name, profile = self.parse(config_path).resolve(profile_name)
        return config_path, name, profile

    @staticmethod
    def dump(profile_set: ProfileSet) -> str:
        """Serializes a configuration as tab indented JSON."""
        return json.dumps(profile_set.to_document(), indent="\t") + "\n"
