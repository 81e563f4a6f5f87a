# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""OpenStack authentication options of a Manila share backend."""

import logging
import tempfile
import weakref
from collections.abc import Mapping
from pathlib import Path

from keystoneauth1 import session as ks_session
from kubernetes.client import CoreV1Api
from openstack.connection import Connection
from pydantic import BaseModel, PrivateAttr

from manila_share_options.auth import AuthOptions, TrustAuthOptions
from manila_share_options.secrets import SecretReference, SecretSource, read_secrets
from manila_share_options.validator import FieldSchema, Validator

logger = logging.getLogger(__name__)

SENSITIVE_PLACEHOLDER = "*****"

_USER_DEPENDENCIES = "os-domainID|os-domainName,os-projectID|os-projectName,os-userID|os-userName"

OPENSTACK_OPTIONS_SCHEMA = (
    # Common options
    FieldSchema("os-authURL", "os_auth_url", depends_on="os-password|os-trustID"),
    FieldSchema("os-region", "os_region_name", optional=True),
    FieldSchema("os-certAuthority", "os_cert_authority", optional=True),
    FieldSchema(
        "os-TLSInsecure",
        "os_tls_insecure",
        optional=True,
        depends_on="os-certAuthority",
        matches="^true|false$",
    ),
    # User authentication
    FieldSchema("os-password", "os_password", optional=True, depends_on=_USER_DEPENDENCIES),
    FieldSchema("os-userID", "os_user_id", optional=True, depends_on="os-password"),
    FieldSchema("os-userName", "os_username", optional=True, depends_on="os-password"),
    FieldSchema("os-domainID", "os_domain_id", optional=True, depends_on="os-password"),
    FieldSchema("os-domainName", "os_domain_name", optional=True, depends_on="os-password"),
    FieldSchema("os-projectID", "os_project_id", optional=True, depends_on="os-password"),
    FieldSchema("os-projectName", "os_project_name", optional=True, depends_on="os-password"),
    # Trustee authentication
    FieldSchema(
        "os-trustID", "os_trust_id", optional=True, depends_on="os-trusteeID,os-trusteePassword"
    ),
    FieldSchema("os-trusteeID", "os_trustee_id", optional=True, depends_on="os-trustID"),
    FieldSchema(
        "os-trusteePassword", "os_trustee_password", optional=True, depends_on="os-trustID"
    ),
)

_SENSITIVE_NAMES = frozenset(("os-password", "os-trusteePassword"))


def build_validator() -> "Validator[OpenStackOptions]":
    """Build the validator for OpenStack options.

    The validator is read-only once built; callers may keep one and pass it around.

    Returns:
        The validator.
    """
    return Validator(OpenStackOptions, OPENSTACK_OPTIONS_SCHEMA)


class OpenStackOptions(BaseModel):
    """Fields used for authenticating to OpenStack.

    Unset fields hold the empty string.

    Attributes:
        os_auth_url: The identity service URL.
        os_region_name: The region.
        os_cert_authority: PEM encoded CA certificates to verify the identity service with.
        os_tls_insecure: "true" to skip TLS verification.
        os_password: The password of the user.
        os_user_id: The user ID.
        os_username: The user name.
        os_domain_id: The domain ID of the user and project.
        os_domain_name: The domain name of the user and project.
        os_project_id: The project ID.
        os_project_name: The project name.
        os_trust_id: The trust to authenticate through.
        os_trustee_id: The user ID of the trustee.
        os_trustee_password: The password of the trustee.
        uses_trust: Whether authentication goes through a trust.
        tls_insecure: Whether TLS verification is disabled.
    """

    os_auth_url: str = ""
    os_region_name: str = ""

    os_cert_authority: str = ""
    os_tls_insecure: str = ""

    os_password: str = ""
    os_user_id: str = ""
    os_username: str = ""

    os_domain_id: str = ""
    os_domain_name: str = ""

    os_project_id: str = ""
    os_project_name: str = ""

    os_trust_id: str = ""
    os_trustee_id: str = ""
    os_trustee_password: str = ""

    _ca_file: str | None = PrivateAttr(default=None)
    _ca_file_finalizer: weakref.finalize | None = PrivateAttr(default=None)

    @classmethod
    def from_secret_reference(
        cls,
        client: CoreV1Api,
        secret_ref: SecretReference,
        validator: "Validator[OpenStackOptions] | None" = None,
    ) -> "OpenStackOptions":
        """Read a Kubernetes Secret, validate it and populate the options.

        Args:
            client: The Kubernetes core API client.
            secret_ref: The Secret holding the parameters.
            validator: The validator to use. A new one is built if not given.

        Returns:
            The populated options.
        """
        params = read_secrets(client, secret_ref)
        return cls.from_map(params, validator=validator)

    @classmethod
    def from_source(
        cls,
        source: SecretSource,
        secret_ref: SecretReference,
        validator: "Validator[OpenStackOptions] | None" = None,
    ) -> "OpenStackOptions":
        """Read parameters from a secret source, validate them and populate the options.

        Args:
            source: The secret source.
            secret_ref: The reference of the parameters in the source.
            validator: The validator to use. A new one is built if not given.

        Returns:
            The populated options.
        """
        params = source.read(secret_ref)
        return cls.from_map(params, validator=validator)

    @classmethod
    def from_map(
        cls,
        params: Mapping[str, str],
        validator: "Validator[OpenStackOptions] | None" = None,
    ) -> "OpenStackOptions":
        """Validate a parameter map and populate the options.

        Args:
            params: The parameter map.
            validator: The validator to use. A new one is built if not given.

        Returns:
            The populated options.
        """
        if validator is None:
            validator = build_validator()
        opts = cls()
        validator.populate(params, opts)
        logger.info(
            "Loaded OpenStack options for %s using %s authentication",
            opts.os_auth_url,
            "trust" if opts.uses_trust else "password",
        )
        return opts

    @property
    def uses_trust(self) -> bool:
        """Whether authentication goes through a trust."""
        return bool(self.os_trust_id)

    @property
    def tls_insecure(self) -> bool:
        """Whether TLS verification is disabled."""
        return self.os_tls_insecure == "true"

    def to_auth_options(self) -> AuthOptions:
        """Convert the options to password authentication options.

        Returns:
            The authentication options.
        """
        user_id, password = self.os_user_id, self.os_password
        if self.uses_trust:
            # The identity payload has no dedicated slots for trustee credentials.
            user_id, password = self.os_trustee_id, self.os_trustee_password

        return AuthOptions(
            identity_endpoint=self.os_auth_url,
            user_id=user_id,
            username=self.os_username,
            password=password,
            tenant_id=self.os_project_id,
            tenant_name=self.os_project_name,
            domain_id=self.os_domain_id,
            domain_name=self.os_domain_name,
        )

    def to_auth_options_ext(self) -> TrustAuthOptions:
        """Convert the options to authentication options carrying the trust.

        Returns:
            The trust authentication options.
        """
        return TrustAuthOptions(auth_options=self.to_auth_options(), trust_id=self.os_trust_id)

    def to_session(self) -> ks_session.Session:
        """Build a keystoneauth session authenticating with these options.

        The CA certificates, if any, are written to a temporary file since keystoneauth only
        accepts a path for them. The file is shared by the sessions of these options and removed
        on close or when the options are garbage collected. No request is made until the
        session is used.

        Returns:
            The session.
        """
        verify: bool | str = True
        if self.tls_insecure:
            verify = False
        elif self.os_cert_authority:
            verify = self._ca_file_path()
        auth = self.to_auth_options_ext().to_keystone_auth()
        return ks_session.Session(auth=auth, verify=verify)

    def _ca_file_path(self) -> str:
        """Write the CA certificates to a temporary file, once per options instance.

        Returns:
            The path of the CA file.
        """
        if self._ca_file is None:
            with tempfile.NamedTemporaryFile(
                mode="w", encoding="utf-8", prefix="os-ca-", suffix=".pem", delete=False
            ) as ca_file:
                ca_file.write(self.os_cert_authority)
            self._ca_file = ca_file.name
            self._ca_file_finalizer = weakref.finalize(self, _remove_file, ca_file.name)
            logger.debug("Wrote OpenStack CA certificates to %s", ca_file.name)
        return self._ca_file

    def close(self) -> None:
        """Remove the temporary CA file written for the sessions, if any."""
        if self._ca_file_finalizer is not None:
            self._ca_file_finalizer()
        self._ca_file = None
        self._ca_file_finalizer = None

    def to_connection(self) -> Connection:
        """Build an OpenStack SDK connection authenticating with these options.

        Returns:
            The connection.
        """
        return Connection(session=self.to_session(), region_name=self.os_region_name or None)

    def masked(self) -> dict[str, str]:
        """Map the external names of the set fields to their values, hiding passwords.

        Returns:
            The masked parameter map.
        """
        masked = {}
        for field in OPENSTACK_OPTIONS_SCHEMA:
            value = getattr(self, field.attribute)
            if value:
                masked[field.name] = (
                    SENSITIVE_PLACEHOLDER if field.name in _SENSITIVE_NAMES else value
                )
        return masked


def _remove_file(path: str) -> None:
    """Remove a file if it still exists.

    Args:
        path: The file path.
    """
    Path(path).unlink(missing_ok=True)
