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
Unit tests for version range checks.
"""
import pytest
from runcontainer.errors import VersionError
from runcontainer.UTILS.version_range import (
    VersionRange, check_version_range, normalize_version, parse_version,
)


class TestNormalizeVersion:
    """Tests for the patch wildcard."""

    @pytest.mark.parametrize("version", ["0.1", "1.2", "10.20"])
    def test_two_components_get_wildcard_patch(self, version):
        normalized = normalize_version(version)
        assert normalized.endswith(".9999")
        assert check_version_range(normalized, f">={version}")

    def test_three_components_unchanged(self):
        assert normalize_version("1.2.3") == "1.2.3"

    def test_single_component_unchanged(self):
        assert normalize_version("1") == "1"


class TestParseVersion:
    """Tests for strict version parsing."""

    def test_parse(self):
        parsed = parse_version("1.2.3")
        assert (parsed.major, parsed.minor, parsed.patch) == (1, 2, 3)

    def test_parse_partial(self):
        parsed = parse_version("1.2")
        assert (parsed.major, parsed.minor, parsed.patch) == (1, 2, 9999)

    def test_parse_prerelease(self):
        parsed = parse_version("1.2.3-SNAPSHOT")
        assert parsed.prerelease == "SNAPSHOT"

    @pytest.mark.parametrize("version", ["", "abc", "1", "1.2.3.4", "v1.2.3", "1.2.3.post1", "1!1.2.3"])
    def test_invalid_versions_raise(self, version):
        with pytest.raises(VersionError):
            parse_version(version)


class TestCheckVersionRange:
    """Tests for range evaluation."""

    def test_greater_or_equal(self):
        assert check_version_range("1.2.3", ">=1.2.3")
        assert not check_version_range("1.2.2", ">=1.2.3")

    def test_partial_version_accepts_any_patch(self):
        assert check_version_range("1.2", ">=1.2.5")
        assert not check_version_range("1.1", ">=1.2.0")

    def test_and_comparators(self):
        assert check_version_range("1.5.0", ">1.0.0 <2.0.0")
        assert not check_version_range("2.0.0", ">1.0.0 <2.0.0")

    def test_or_alternatives(self):
        assert check_version_range("2.1.0", "<1.0.0 || >=2.0.0")
        assert not check_version_range("1.5.0", "<1.0.0 || >=2.0.0")

    def test_bare_version_means_equal(self):
        assert check_version_range("1.2.3", "1.2.3")
        assert not check_version_range("1.2.4", "1.2.3")

    def test_not_equal(self):
        assert not check_version_range("1.2.3", "!1.2.3")
        assert check_version_range("1.2.4", "!=1.2.3")

    def test_empty_current_version_raises(self):
        """A missing reference version yields '>=', which is not a range."""
        with pytest.raises(VersionError):
            check_version_range("1.2.3", ">=")

    def test_empty_range_raises(self):
        with pytest.raises(VersionError):
            VersionRange.parse("")

    def test_invalid_version_raises(self):
        with pytest.raises(VersionError):
            check_version_range("latest", ">=1.0.0")

    def test_no_side_effects(self):
        version_range = VersionRange.parse(">=1.2.3")
        assert version_range.contains(parse_version("1.3.0"))
        assert version_range.contains(parse_version("1.3.0"))

    def test_two_component_bound(self):
        assert check_version_range("1.2.0", ">=1.2")
        assert not check_version_range("1.1.9", ">=1.2")

    def test_prerelease_ordering(self):
        assert check_version_range("1.2.3-dev", ">=1.2.3-beta")
        assert not check_version_range("1.2.3-alpha", ">=1.2.3-beta")
        assert check_version_range("1.2.3-rc.10", ">1.2.3-rc.2")

    def test_prerelease_below_release(self):
        assert check_version_range("2.0.0-rc.1", "<2.0.0")
        assert not check_version_range("2.0.0-rc.1", ">=2.0.0")

    def test_prerelease_is_checked(self):
        assert check_version_range("1.2.3-SNAPSHOT", ">=1.0.0")

    def test_build_metadata_ignored(self):
        assert check_version_range("1.2.3+build.5", "1.2.3")

    @pytest.mark.parametrize("compare", [">=v1.0.0", ">=1.0.0.0", ">=1", "~>1.0.0"])
    def test_invalid_range_version_raises(self, compare):
        with pytest.raises(VersionError):
            check_version_range("1.2.3", compare)
