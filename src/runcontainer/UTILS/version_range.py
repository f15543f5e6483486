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
Semantic version range checks used to find stale images.
"""
import operator
import re
from typing import Callable, List, Tuple

import semver

from ..errors import VersionError

# A missing patch means any patch of that minor is fine
PATCH_WILDCARD = "9999"

_COMPARATOR = re.compile(r"^(?P<op>>=|<=|!=|==|>|<|=|!)?(?P<version>.*)$")
_OPERATORS = {
    "": operator.eq,
    "=": operator.eq,
    "==": operator.eq,
    "!": operator.ne,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

Comparator = Tuple[Callable[[int, int], bool], semver.Version]


def normalize_version(version: str) -> str:
    """
    Appends the patch wildcard to 'major.minor' versions.

    :param version: A version string.
    :return: 'major.minor.9999' for two component versions, the input otherwise.
    """
    if version.count(".") == 1:
        return f"{version}.{PATCH_WILDCARD}"
    return version


def _parse(version: str, original: str) -> semver.Version:
    try:
        return semver.Version.parse(version)
    except (TypeError, ValueError) as e:
        raise VersionError(f"Invalid version '{original}': {e}") from e


def parse_version(version: str) -> semver.Version:
    """
    Parses a 'major.minor.patch[-prerelease][+build]' version, normalizing
    'major.minor' first.

    :raises VersionError: If the version is not a semantic version.
    """
    return _parse(normalize_version(version.strip()), version)


class VersionRange:
    """
    A parsed range expression such as '>=1.2.3', '>1.0.0 <2.0.0' or
    '<1.0.0 || >=2.0.0'.

    Comparators separated by spaces must all hold, alternatives separated
    by '||' are OR-ed. A bare version means equality. A 'major.minor'
    bound stands for 'major.minor.0'.
    """
    def __init__(self, expression: str, alternatives: List[List[Comparator]]):
        self.expression = expression
        self.alternatives = alternatives

    @classmethod
    def parse(cls, expression: str) -> "VersionRange":
        """
        Parses a range expression.

        :raises VersionError: If the expression or one of its versions is invalid.
        """
        alternatives = []
        for alternative in expression.split("||"):
            comparators = alternative.split()
            if not comparators:
                raise VersionError(f"Invalid version range '{expression}': empty comparator")
            parsed = []
            for comparator in comparators:
                match = _COMPARATOR.match(comparator)
                bound = match.group("version")
                if not bound:
                    raise VersionError(f"Invalid version range '{expression}': missing version in '{comparator}'")
                if bound.count(".") == 1:
                    bound = f"{bound}.0"
                parsed.append((_OPERATORS[match.group("op") or ""], _parse(bound, comparator)))
            alternatives.append(parsed)
        return cls(expression, alternatives)

    def contains(self, version: semver.Version) -> bool:
        return any(
            all(op(version.compare(bound), 0) for op, bound in comparators)
            for comparators in self.alternatives
        )

    def __repr__(self) -> str:
        return f"VersionRange({self.expression!r})"


def check_version_range(version: str, compare: str) -> bool:
    """
    Tells whether a version lies within a range.

    :param version: Version to check, 'major.minor' is accepted.
    :param compare: Range expression, e.g. '>=1.2.9999'.
    :return: True if the version satisfies the range.
    :raises VersionError: If either side cannot be parsed.
    """
    parsed = parse_version(version)
    return VersionRange.parse(compare).contains(parsed)
