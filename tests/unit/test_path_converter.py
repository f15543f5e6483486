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
Unit tests for host path conversion.
"""
from runcontainer.UTILS.path_converter import PathConverter, split_drive, to_slash


class TestPathConverter:
    """Tests for PathConverter."""

    def test_identity_on_linux(self):
        converter = PathConverter("linux", {"DOCKER_MACHINE_NAME": "default"})
        assert converter.convert("/c/work/proj") == "/c/work/proj"

    def test_identity_on_windows_without_docker_machine(self):
        converter = PathConverter("windows", {})
        assert converter.convert("C:/work/proj") == "C:/work/proj"

    def test_legacy_drive_rewrite(self):
        converter = PathConverter("windows", {"DOCKER_MACHINE_NAME": "default"})
        assert converter.convert("c:/work/proj") == "/C/work/proj"
        assert converter.convert("D:/") == "/D/"

    def test_legacy_leaves_paths_without_drive(self):
        converter = PathConverter("windows", {"DOCKER_MACHINE_NAME": "default"})
        assert converter.convert("/already/posix") == "/already/posix"


class TestPathHelpers:
    """Tests for drive splitting and separators."""

    def test_split_drive_posix(self):
        assert split_drive("/home/me/proj", "linux") == ("/", "home/me/proj")

    def test_split_drive_root(self):
        assert split_drive("/", "linux") == ("/", "")

    def test_split_drive_windows(self):
        assert split_drive("C:/Users/me", "windows") == ("C:/", "Users/me")

    def test_to_slash(self):
        assert to_slash("C:\\Users\\me", "windows") == "C:/Users/me"
        assert to_slash("/home/me", "linux") == "/home/me"
