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
Removal of stale images, dangling images and stopped containers.
"""
import logging
from typing import Any, Iterable, Optional, Sequence

import click

from ..errors import ConfigurationError, RegistryError, VersionError
from ..MODELS.profile import Profile
from ..REGISTRY.image_reference import ImageReference
from ..REGISTRY.registry_client import ImageRegistry, best_effort_registry_errors
from ..UTILS.version_range import check_version_range

LOGGER = logging.getLogger(__name__)


def select_tag_version(tags: Iterable[str]) -> str:
    """
    Picks the most specific version found in a list of image tags.

    :param tags: Tags such as 'app:1.2' or 'app:1.10-alpine'.
    :return: The longest version string, empty if no tag carries one.
    """
    selected = ""
    for tag in tags:
        version = ImageReference.parse(tag).version or ""
        if len(version) > len(selected):
            selected = version
    return selected


class PruneOrchestrator:
    """
    Removes images older than the one a profile currently runs.

    Images are compared through RUNCONTAINER_IMAGE_VERSION when they define
    it, through the version in their tags otherwise.
    """
    def __init__(self, registry: Optional[ImageRegistry] = None):
        """
        :param registry: Daemon client, a default one if not given.
        """
        self.registry = registry or ImageRegistry()

    def prune(self, profile: Optional[Profile], patterns: Sequence[str]):
        """
        Prunes stale images matching the patterns, then dangling images and
        stopped containers.

        :param profile: Profile whose image is the reference version.
                        Only needed when patterns are given.
        :param patterns: Image reference patterns to check, e.g. 'app:*'.
        :raises RegistryError: The first daemon failure that prevented a
                               version check, after all pruning is done.
        """
        first_error = None
        if patterns:
            if profile is None:
                raise ConfigurationError("A profile is required to prune images by version")
            try:
                current = self.registry.actual_image_version(profile.lookup_name)
            except RegistryError as e:
                first_error = e
            else:
                first_error = self._prune_stale(f">={current}", patterns)

        with best_effort_registry_errors("prune dangling images (untagged)"):
            self.registry.prune_dangling_images()
        with best_effort_registry_errors("prune unused containers"):
            self.registry.prune_containers()

        if first_error is not None:
            raise first_error

    def _prune_stale(self, current: str, patterns: Sequence[str]) -> Optional[RegistryError]:
        first_error = None
        for pattern in patterns:
            images = []
            with best_effort_registry_errors(f"list images matching {pattern}"):
                images = self.registry.list_images(pattern)

            for image in images:
                try:
                    actual = self.actual_version(image)
                except RegistryError as e:
                    first_error = first_error or e
                    continue

                try:
                    up_to_date = check_version_range(actual, current)
                except VersionError as e:
                    LOGGER.warning("Check version for %s vs %s: %s", actual, current, e)
                    continue

                if not up_to_date:
                    self._remove(image)
        return first_error

    def actual_version(self, image: Any) -> str:
        """
        Version of a local image: the baked in one, else the one in its tags.

        :raises RegistryError: If the image cannot be inspected.
        """
        return self.registry.image_version(image.id) or select_tag_version(image.tags)

    def _remove(self, image: Any):
        for tag in image.tags:
            with best_effort_registry_errors(f"remove image {tag}"):
                for item in self.registry.remove_image(tag):
                    if item.get("Untagged"):
                        click.echo(f"Untagged {item['Untagged']}")
                    if item.get("Deleted"):
                        click.echo(f"Deleted {item['Deleted']}")
