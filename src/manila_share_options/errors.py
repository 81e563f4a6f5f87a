# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Errors used by the share options loader."""
from __future__ import annotations


class ShareOptionsError(Exception):
    """Generic share options error as base exception."""


class SchemaDeclarationError(ShareOptionsError):
    """Represents a malformed field schema, detected when building a validator."""


class SecretSourceError(ShareOptionsError):
    """Represents an error while reading parameters from a secret source."""


class ParameterValidationError(ShareOptionsError):
    """Base class for errors of a parameter map not conforming to the schema.

    Attributes:
        name: The external name of the offending field.
    """

    def __init__(self, name: str, msg: str):
        """Initialize a new instance of the ParameterValidationError exception.

        Args:
            name: The external name of the offending field.
            msg: Explanation of the error.
        """
        super().__init__(msg)
        self.name = name


class MissingRequiredFieldError(ParameterValidationError):
    """Represents a required field absent from the parameter map."""

    def __init__(self, name: str):
        """Initialize a new instance of the MissingRequiredFieldError exception.

        Args:
            name: The external name of the missing field.
        """
        super().__init__(name, f"missing required field {name}")


class UnsatisfiedDependencyError(ParameterValidationError):
    """Represents a field present without the companion fields it requires.

    Attributes:
        expression: The dependency expression that evaluated false.
    """

    def __init__(self, name: str, expression: str):
        """Initialize a new instance of the UnsatisfiedDependencyError exception.

        Args:
            name: The external name of the field with the dependency.
            expression: The dependency expression in its textual form.
        """
        super().__init__(name, f"parameter {name} requires {expression}")
        self.expression = expression


class PatternMismatchError(ParameterValidationError):
    """Represents a field value not matching the pattern declared for it.

    Attributes:
        value: The rejected value.
        pattern: The pattern the value had to match.
    """

    def __init__(self, name: str, value: str, pattern: str):
        """Initialize a new instance of the PatternMismatchError exception.

        Args:
            name: The external name of the field.
            value: The rejected value.
            pattern: The pattern the value had to match.
        """
        super().__init__(name, f"value {value!r} of parameter {name} does not match {pattern}")
        self.value = value
        self.pattern = pattern
