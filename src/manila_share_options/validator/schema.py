# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Module containing the declaration of a configuration field."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldSchema:
    """Declaration of one parameter accepted by a validator.

    Attributes:
        name: The external key of the parameter in the parameter map.
        attribute: The attribute of the target object receiving the value.
        optional: Whether the parameter may be absent.
        depends_on: Dependency expression that must hold when the parameter is present.
        matches: Regular expression the whole value must match when the parameter is present.
    """

    name: str
    attribute: str
    optional: bool = False
    depends_on: str | None = None
    matches: str | None = None
