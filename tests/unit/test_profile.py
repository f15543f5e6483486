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
Unit tests for profile models.
"""
import pytest
from pydantic import ValidationError
from runcontainer.errors import ConfigurationError
from runcontainer.MODELS.profile import MountLocation, Profile, ProfileSet


class TestProfile:
    """Tests for Profile defaults and derived values."""

    def test_defaults(self):
        profile = Profile()
        assert profile.mount_point == "current_sources"
        assert profile.temp_dir_mount_location == MountLocation.HOST
        assert profile.extra_options == []
        assert profile.environment == {}
        assert profile.run_before_commands == []
        assert profile.run_after_commands == []

    def test_empty_values_get_defaults(self):
        profile = Profile.model_validate({
            "mount-point": "",
            "temp-dir-mount-location": "",
            "docker-options": None,
            "environment": None,
            "run-before-commands": None,
        })
        assert profile.mount_point == "current_sources"
        assert profile.temp_dir_mount_location == MountLocation.HOST
        assert profile.extra_options == []
        assert profile.environment == {}
        assert profile.run_before_commands == []

    def test_aliases_and_field_names(self):
        by_alias = Profile.model_validate({"docker-image": "app", "docker-interactive": True})
        by_name = Profile(image="app", interactive=True)
        assert by_alias == by_name

    def test_image_name(self):
        assert Profile(image="app").image_name == "app"
        assert Profile(image="app", image_tag="1.0").image_name == "app:1.0"

    def test_lookup_name(self):
        assert Profile(image="app").lookup_name == "app:latest"
        assert Profile(image="app", image_tag="1.0").lookup_name == "app:1.0"

    def test_command_split_on_whitespace(self):
        assert Profile(entry_point="/bin/bash  -l").command == ["/bin/bash", "-l"]
        assert Profile().command == []

    def test_environment_values_are_strings(self):
        profile = Profile(environment={"A": 1, "B": True, "C": None})
        assert profile.environment == {"A": "1", "B": "True", "C": ""}

    def test_unknown_mount_location_rejected(self):
        with pytest.raises(ValidationError):
            Profile.model_validate({"temp-dir-mount-location": "cloud"})

    def test_profile_is_frozen(self):
        profile = Profile(image="app")
        with pytest.raises(ValidationError):
            profile.image = "other"


class TestProfileSet:
    """Tests for profile resolution."""

    def make_set(self, default=""):
        return ProfileSet.model_validate({
            "default-profile": default,
            "configs": {
                "default": {"docker-image": "base"},
                "dev": {"docker-image": "dev", "docker-image-tag": "1.0"},
            },
        })

    def test_resolve_explicit_name(self):
        name, profile = self.make_set(default="default").resolve("dev")
        assert name == "dev"
        assert profile.image == "dev"

    def test_resolve_file_default(self):
        name, profile = self.make_set(default="dev").resolve()
        assert name == "dev"

    def test_resolve_falls_back_to_default(self):
        name, profile = self.make_set().resolve(None)
        assert name == "default"
        assert profile.image == "base"

    def test_resolve_missing_profile_raises(self):
        with pytest.raises(ConfigurationError, match="nope"):
            self.make_set().resolve("nope")

    def test_round_trip(self):
        profile_set = ProfileSet(
            default_profile="dev",
            configs={"dev": Profile(
                image="app",
                image_tag="2.1",
                entry_point="make test",
                extra_options=["--network host"],
                temp_dir_mount_location=MountLocation.VOLUME,
                environment={"A": "1"},
                run_before_commands=["echo before"],
                run_after_commands=["echo after"],
                with_current_user=True,
            )},
        )
        document = profile_set.to_document()
        assert document["configs"]["dev"]["temp-dir-mount-location"] == "volume"
        assert ProfileSet.model_validate(document) == profile_set
