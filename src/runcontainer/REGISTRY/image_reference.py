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
Image reference naming and version parsing.
Parses image references like 'app:1.2', 'app:1.2.3-alpine' or 'app:latest'.
"""

import re
from typing import Optional
from dataclasses import dataclass

DEFAULT_TAG = "latest"

VERSION_PATTERN = r"(?P<version>\d+\.\d+(?:\.\d+){0,1})"
RE_IMAGE = re.compile(
    rf"^(?P<image>.*?)(?::(?:{VERSION_PATTERN}(?:(?P<sep>[\.-])(?P<spec>.+))?|(?P<fix>.+)))?$"
)


def canonical_name(image: str, tag: Optional[str] = None) -> str:
    """
    Combines an image name and a tag.

    Args:
        image: Image repository, possibly already carrying a tag.
        tag: Optional tag.

    Returns:
        'image:tag' if a tag is given, the image alone otherwise.
    """
    if tag:
        return f"{image}:{tag}"
    return image


def lookup_name(name: str) -> str:
    """Adds the default tag to a reference that has no tag separator."""
    if ":" not in name:
        return f"{name}:{DEFAULT_TAG}"
    return name


@dataclass
class ImageReference:
    """
    Image reference split into its repository and the parts of its tag.

    Examples:
        - app -> image='app', no version
        - app:1.2 -> version='1.2'
        - app:1.2.3-alpine -> version='1.2.3', sep='-', spec='alpine'
        - app:latest -> fix='latest', no version
    """

    image: str
    version: Optional[str] = None
    sep: Optional[str] = None
    spec: Optional[str] = None
    fix: Optional[str] = None

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """
        Parse an image reference string.

        Args:
            reference: Image reference string (e.g., 'app:1.2', 'registry/app:1.2-dev')

        Returns:
            Parsed ImageReference object.
        """
        if not reference:
            raise ValueError("Empty image reference")

        # RE_IMAGE always matches: its tag part is optional
        match = RE_IMAGE.match(reference)
        return cls(
            image=match.group("image"),
            version=match.group("version"),
            sep=match.group("sep"),
            spec=match.group("spec"),
            fix=match.group("fix"),
        )

    @property
    def tag(self) -> Optional[str]:
        """The tag as written in the reference."""
        if self.version:
            return f"{self.version}{self.sep or ''}{self.spec or ''}"
        return self.fix

    @property
    def name(self) -> str:
        """Reference rebuilt from its parts."""
        return canonical_name(self.image, self.tag)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ImageReference({self.name})"

