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
Docker daemon client for the images runcontainer runs and prunes.
Wraps the docker SDK and turns its failures into RegistryError.
"""

import logging
import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import docker
from docker.errors import DockerException
from packaging.version import InvalidVersion, Version

from ..errors import RegistryError

LOGGER = logging.getLogger(__name__)

MINIMUM_DOCKER_VERSION = "1.25"
API_VERSION_VARIABLE = "DOCKER_API_VERSION"
IMAGE_VERSION_VARIABLE = "RUNCONTAINER_IMAGE_VERSION"


@contextmanager
def fatal_registry_errors(action: str) -> Iterator[None]:
    """
    Turns docker failures into RegistryError.

    Used where the daemon answer is required to go on.

    Args:
        action: What was being done, for the error message.
    """
    try:
        yield
    except DockerException as e:
        raise RegistryError(f"Unable to {action}: {e}") from e


@contextmanager
def best_effort_registry_errors(action: str) -> Iterator[None]:
    """
    Reports docker failures and carries on.

    Used for maintenance requests whose failure must not stop the caller.

    Args:
        action: What was being done, for the warning.
    """
    try:
        yield
    except (DockerException, RegistryError) as e:
        LOGGER.warning("Error while trying to %s: %s", action, e)


class ImageRegistry:
    """
    Lists, inspects and removes images of the local docker daemon.

    The connection is opened on first use.
    """

    def __init__(self, client: Optional[docker.DockerClient] = None, api_version: Optional[str] = None):
        """
        Initialize the registry.

        Args:
            client: Existing docker client. Defaults to one built from the environment.
            api_version: Daemon API version. Defaults to DOCKER_API_VERSION, or negotiation.
        """
        self._client = client
        self.api_version = api_version or os.environ.get(API_VERSION_VARIABLE) or "auto"

    @property
    def client(self) -> docker.DockerClient:
        """The docker client, connected on first access."""
        if self._client is None:
            with fatal_registry_errors("connect to the docker daemon"):
                client = docker.from_env(version=self.api_version)
            self._check_api_version(client.api.api_version)
            self._client = client
        return self._client

    @staticmethod
    def _check_api_version(api_version: str) -> None:
        try:
            supported = Version(api_version) >= Version(MINIMUM_DOCKER_VERSION)
        except InvalidVersion:
            # Let the daemon reject it if it really is unusable
            return
        if not supported:
            raise RegistryError(
                f"Docker API version {api_version} is too old, {MINIMUM_DOCKER_VERSION} or later is required"
            )

    def list_images(self, reference: str) -> List[Any]:
        """
        List the local images matching a reference pattern.

        Args:
            reference: Reference or pattern, e.g. 'app:*' or 'registry/app'.
        """
        with fatal_registry_errors(f"list images matching {reference}"):
            return self.client.images.list(filters={"reference": reference})

    def find_image(self, reference: str) -> Optional[Any]:
        """Return the image matching a reference, None unless exactly one matches."""
        images = self.list_images(reference)
        if len(images) != 1:
            return None
        return images[0]

    def inspect(self, image_id: str) -> Dict[str, Any]:
        """Return the raw inspection document of an image."""
        with fatal_registry_errors(f"inspect image {image_id}"):
            return self.client.api.inspect_image(image_id)

    def configured_user(self, reference: str) -> str:
        """
        Get the user an image is configured to run as.

        Args:
            reference: Image reference with its tag.

        Returns:
            The configured user, empty if the image does not set one.

        Raises:
            RegistryError: If the image is not available locally or cannot be inspected.
        """
        image = self.find_image(reference)
        if image is None:
            raise RegistryError(f"Unable to find image {reference} locally, pull it first")
        config = self.inspect(image.id).get("Config") or {}
        return config.get("User") or ""

    def image_version(self, image_id: str) -> str:
        """
        Get the version baked into an image through RUNCONTAINER_IMAGE_VERSION.

        Returns:
            The version, empty if the image does not define it.
        """
        inspect = self.inspect(image_id)
        for section in ("Config", "ContainerConfig"):
            for variable in (inspect.get(section) or {}).get("Env") or []:
                name, _, value = variable.partition("=")
                if name == IMAGE_VERSION_VARIABLE:
                    return value
        return ""

    def actual_image_version(self, reference: str) -> str:
        """Get the baked in version of the image matching a reference, empty if unknown."""
        image = self.find_image(reference)
        if image is None:
            return ""
        return self.image_version(image.id)

    def remove_image(self, reference: str) -> List[Dict[str, str]]:
        """
        Remove an image tag.

        Returns:
            The daemon report, entries carrying 'Untagged' or 'Deleted'.
        """
        with fatal_registry_errors(f"remove image {reference}"):
            return self.client.api.remove_image(reference) or []

    def prune_dangling_images(self) -> Dict[str, Any]:
        """Remove untagged images no container refers to."""
        with fatal_registry_errors("prune dangling images"):
            return self.client.images.prune(filters={"dangling": True})

    def prune_containers(self) -> Dict[str, Any]:
        """Remove stopped containers."""
        with fatal_registry_errors("prune unused containers"):
            return self.client.containers.prune()
