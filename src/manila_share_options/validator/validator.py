# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Validate flat parameter maps against a field schema and populate models with them."""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

from manila_share_options.errors import (
    MissingRequiredFieldError,
    PatternMismatchError,
    SchemaDeclarationError,
    UnsatisfiedDependencyError,
)
from manila_share_options.validator import expression
from manila_share_options.validator.schema import FieldSchema

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class _CompiledField:
    """A field declaration with its dependency expression and pattern parsed.

    Attributes:
        schema: The original declaration.
        depends_on: The parsed dependency expression, if any.
        matches: The compiled value pattern, if any.
    """

    schema: FieldSchema
    depends_on: expression.Conjunction | None
    matches: re.Pattern[str] | None


class Validator(Generic[ModelT]):
    """Checks parameter maps against a schema and copies them into a model.

    The schema is checked and parsed once, on construction. Afterwards the validator is
    read-only and may be shared, as long as each populate call gets its own target.
    """

    def __init__(self, target_type: type[ModelT], schema: Iterable[FieldSchema]):
        """Construct the validator.

        Args:
            target_type: The model class whose attributes the schema populates.
            schema: The field declarations, in validation order.

        Raises:
            SchemaDeclarationError: If the schema is malformed.
        """
        self._target_type = target_type
        declarations = tuple(schema)
        names = [declaration.name for declaration in declarations]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise SchemaDeclarationError(f"Duplicate field names: {', '.join(duplicates)}")
        self._fields = tuple(
            self._compile(declaration, set(names)) for declaration in declarations
        )

    def _compile(self, declaration: FieldSchema, declared_names: set[str]) -> _CompiledField:
        """Check one declaration against the target type and the other declarations.

        Args:
            declaration: The field declaration.
            declared_names: External names of all fields in the schema.

        Raises:
            SchemaDeclarationError: If the declaration is malformed.

        Returns:
            The compiled field.
        """
        if declaration.attribute not in self._target_type.model_fields:
            raise SchemaDeclarationError(
                f"Field {declaration.name} targets unknown attribute "
                f"{self._target_type.__name__}.{declaration.attribute}"
            )

        depends_on = None
        if declaration.depends_on is not None:
            depends_on = expression.parse(declaration.depends_on)
            unknown = [name for name in depends_on.names if name not in declared_names]
            if unknown:
                raise SchemaDeclarationError(
                    f"Field {declaration.name} depends on undeclared fields: {', '.join(unknown)}"
                )

        matches = None
        if declaration.matches is not None:
            try:
                matches = re.compile(declaration.matches)
            except re.error as exc:
                raise SchemaDeclarationError(
                    f"Field {declaration.name} has an invalid pattern {declaration.matches!r}"
                ) from exc

        return _CompiledField(schema=declaration, depends_on=depends_on, matches=matches)

    @property
    def names(self) -> tuple[str, ...]:
        """The external names of the declared fields, in schema order."""
        return tuple(field.schema.name for field in self._fields)

    def validate(self, params: Mapping[str, str]) -> None:
        """Check the parameter map without populating anything.

        Args:
            params: The parameter map.

        Raises:
            MissingRequiredFieldError: If a required field is absent.
            UnsatisfiedDependencyError: If a present field lacks the fields it depends on.
            PatternMismatchError: If a present field's value does not match its pattern.
        """
        for field in self._fields:
            self._check(field, params)

    def populate(self, params: Mapping[str, str], target: ModelT) -> None:
        """Validate the parameter map and copy its values into the target.

        Validation stops at the first failing field. The target should be discarded on error,
        as fields before the failing one have been assigned already.

        Args:
            params: The parameter map.
            target: The model instance to populate.

        Raises:
            TypeError: If the target is not an instance of the validator's target type.
        """
        if not isinstance(target, self._target_type):
            raise TypeError(
                f"Expected {self._target_type.__name__} target, got {type(target).__name__}"
            )
        for field in self._fields:
            if self._check(field, params):
                setattr(target, field.schema.attribute, params[field.schema.name])

        if logger.isEnabledFor(logging.DEBUG):
            ignored = sorted(set(params) - set(self.names))
            if ignored:
                logger.debug("Ignoring undeclared parameters: %s", ", ".join(ignored))

    @staticmethod
    def _check(field: _CompiledField, params: Mapping[str, str]) -> bool:
        """Check a single field against the parameter map.

        Args:
            field: The compiled field.
            params: The parameter map.

        Raises:
            MissingRequiredFieldError: If a required field is absent.
            UnsatisfiedDependencyError: If a present field lacks the fields it depends on.
            PatternMismatchError: If a present field's value does not match its pattern.

        Returns:
            Whether the field is present in the map.
        """
        name = field.schema.name
        if name not in params:
            if not field.schema.optional:
                logger.error("Missing required parameter %s", name)
                raise MissingRequiredFieldError(name)
            return False

        if field.depends_on is not None and not field.depends_on.evaluate(params):
            logger.error("Parameter %s requires %s", name, field.depends_on)
            raise UnsatisfiedDependencyError(name, str(field.depends_on))

        value = params[name]
        if field.matches is not None and field.matches.fullmatch(value) is None:
            logger.error("Parameter %s does not match %s", name, field.matches.pattern)
            raise PatternMismatchError(name, value, field.matches.pattern)
        return True
