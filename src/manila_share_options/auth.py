# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Authentication payloads for the OpenStack identity service."""

from dataclasses import dataclass
from typing import Any

from keystoneauth1.identity import v3


@dataclass(frozen=True)
class AuthOptions:
    """Options for password authentication against the identity service.

    Attributes:
        identity_endpoint: The identity service URL.
        user_id: The user ID.
        username: The user name.
        password: The password of the user.
        tenant_id: The ID of the project to scope to.
        tenant_name: The name of the project to scope to.
        domain_id: The ID of the domain of the user and project.
        domain_name: The name of the domain of the user and project.
    """

    identity_endpoint: str = ""
    user_id: str = ""
    username: str = ""
    password: str = ""
    tenant_id: str = ""
    tenant_name: str = ""
    domain_id: str = ""
    domain_name: str = ""

    def to_keystone_auth(self) -> v3.Password:
        """Build the keystoneauth password plugin for these options.

        Returns:
            The authentication plugin.
        """
        return v3.Password(**_user_kwargs(self), **_scope_kwargs(self))


@dataclass(frozen=True)
class TrustAuthOptions:
    """Authentication options extended with a trust, for delegated authentication.

    Attributes:
        auth_options: The options identifying the trustee.
        trust_id: The ID of the trust to scope to.
    """

    auth_options: AuthOptions
    trust_id: str = ""

    def to_keystone_auth(self) -> v3.Password:
        """Build the keystoneauth password plugin, scoped to the trust if one is set.

        Returns:
            The authentication plugin.
        """
        if not self.trust_id:
            return self.auth_options.to_keystone_auth()
        return v3.Password(**_user_kwargs(self.auth_options), trust_id=self.trust_id)


def _or_none(value: str) -> str | None:
    """Map the unset (empty) value to None, as expected by keystoneauth.

    Args:
        value: The option value.

    Returns:
        The value, or None if empty.
    """
    return value or None


def _user_kwargs(options: AuthOptions) -> dict[str, Any]:
    """Build the keystoneauth arguments identifying the user.

    Args:
        options: The authentication options.

    Returns:
        The keyword arguments.
    """
    return {
        "auth_url": options.identity_endpoint,
        "user_id": _or_none(options.user_id),
        "username": _or_none(options.username),
        "password": options.password,
        "user_domain_id": _or_none(options.domain_id),
        "user_domain_name": _or_none(options.domain_name),
    }


def _scope_kwargs(options: AuthOptions) -> dict[str, Any]:
    """Build the keystoneauth arguments for the token scope.

    A project ID takes precedence over a project name. Without a project, the token is
    scoped to the domain, if any.

    Args:
        options: The authentication options.

    Returns:
        The keyword arguments.
    """
    if options.tenant_id:
        return {"project_id": options.tenant_id}
    if options.tenant_name:
        return {
            "project_name": options.tenant_name,
            "project_domain_id": _or_none(options.domain_id),
            "project_domain_name": _or_none(options.domain_name),
        }
    return {
        "domain_id": _or_none(options.domain_id),
        "domain_name": _or_none(options.domain_name),
    }
