# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Sources of raw parameter maps."""

import base64
import binascii
import logging
from pathlib import Path
from typing import Protocol

import yaml
from kubernetes.client import CoreV1Api
from kubernetes.client.exceptions import ApiException
from pydantic import BaseModel, Field

from manila_share_options.errors import SecretSourceError

logger = logging.getLogger(__name__)


class SecretReference(BaseModel):
    """Reference to a Kubernetes Secret.

    Attributes:
        namespace: The namespace of the Secret.
        name: The name of the Secret.
    """

    namespace: str = Field("default", min_length=1)
    name: str = Field(min_length=1)

    def __str__(self) -> str:
        """Return the reference in namespace/name form.

        Returns:
            The string representation.
        """
        return f"{self.namespace}/{self.name}"


class SecretSource(Protocol):  # pylint: disable=too-few-public-methods
    """Interface of a source of parameter maps."""

    def read(self, secret_ref: SecretReference) -> dict[str, str]:
        """Read the parameter map stored under the reference.

        Args:
            secret_ref: The reference to read.

        Raises:
            SecretSourceError: If the parameters cannot be read.
        """


def read_secrets(client: CoreV1Api, secret_ref: SecretReference) -> dict[str, str]:
    """Read a Kubernetes Secret as a parameter map.

    Args:
        client: The Kubernetes core API client.
        secret_ref: The Secret to read.

    Raises:
        SecretSourceError: If the Secret cannot be fetched or its data cannot be decoded.

    Returns:
        The decoded Secret data.
    """
    try:
        secret = client.read_namespaced_secret(
            name=secret_ref.name, namespace=secret_ref.namespace
        )
    except ApiException as exc:
        logger.error("Failed to read secret %s: %s", secret_ref, exc.reason)
        raise SecretSourceError(f"Failed to read secret {secret_ref}") from exc

    params = {}
    for key, encoded in (secret.data or {}).items():
        try:
            params[key] = base64.b64decode(encoded, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise SecretSourceError(f"Invalid data for key {key} in secret {secret_ref}") from exc
    params.update(secret.string_data or {})
    logger.debug("Read %d parameters from secret %s", len(params), secret_ref)
    return params


class KubernetesSecretSource:  # pylint: disable=too-few-public-methods
    """Reads parameter maps from Kubernetes Secrets."""

    def __init__(self, client: CoreV1Api):
        """Construct the object.

        Args:
            client: The Kubernetes core API client.
        """
        self._client = client

    def read(self, secret_ref: SecretReference) -> dict[str, str]:
        """Read the parameter map stored in the Secret.

        Args:
            secret_ref: The Secret to read.

        Returns:
            The decoded Secret data.
        """
        return read_secrets(self._client, secret_ref)


class YamlFileSecretSource:  # pylint: disable=too-few-public-methods
    """Reads a parameter map from a flat YAML mapping on disk.

    The secret reference is not used to locate the data, the file holds a single map.
    """

    def __init__(self, path: Path):
        """Construct the object.

        Args:
            path: The YAML file path.
        """
        self._path = path

    def read(self, secret_ref: SecretReference | None = None) -> dict[str, str]:
        """Read the parameter map from the file.

        Args:
            secret_ref: Unused.

        Raises:
            SecretSourceError: If the file cannot be read or is not a flat string mapping.

        Returns:
            The parameter map.
        """
        try:
            content = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            logger.error("Failed to load parameters from %s", self._path)
            raise SecretSourceError(f"Failed to load parameters from {self._path}") from exc

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise SecretSourceError(f"Expected a mapping in {self._path}")
        non_strings = sorted(
            str(key)
            for key, value in content.items()
            if not isinstance(key, str) or not isinstance(value, str)
        )
        if non_strings:
            raise SecretSourceError(
                f"Non-string parameters in {self._path}: {', '.join(non_strings)}"
            )
        return content
