# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Dependency expressions over the presence of parameters.

An expression such as ``os-domainID|os-domainName,os-userID|os-userName`` is a
conjunction of comma separated groups, each group being an alternation of
``|`` separated parameter names. A name holds when it is a key of the
parameter map, regardless of its value.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from manila_share_options.errors import SchemaDeclarationError

AND_SEPARATOR = ","
OR_SEPARATOR = "|"


@dataclass(frozen=True)
class Alternation:
    """A group of names of which at least one must be present.

    Attributes:
        names: The alternative parameter names.
    """

    names: tuple[str, ...]

    def evaluate(self, params: Mapping[str, str]) -> bool:
        """Check whether any of the names is present.

        Args:
            params: The parameter map.

        Returns:
            True if at least one name is a key of the map.
        """
        return any(name in params for name in self.names)

    def __str__(self) -> str:
        """Render the group in its textual form.

        Returns:
            The names joined by the OR separator.
        """
        return OR_SEPARATOR.join(self.names)


@dataclass(frozen=True)
class Conjunction:
    """Groups which must all be satisfied.

    Attributes:
        groups: The alternation groups.
    """

    groups: tuple[Alternation, ...]

    @property
    def names(self) -> tuple[str, ...]:
        """All names referenced by the expression, in order of appearance."""
        return tuple(name for group in self.groups for name in group.names)

    def evaluate(self, params: Mapping[str, str]) -> bool:
        """Check whether every group is satisfied.

        Args:
            params: The parameter map.

        Returns:
            True if each group has at least one name present in the map.
        """
        return all(group.evaluate(params) for group in self.groups)

    def __str__(self) -> str:
        """Render the expression in its textual form.

        Returns:
            The groups joined by the AND separator.
        """
        return AND_SEPARATOR.join(str(group) for group in self.groups)


def parse(expression: str) -> Conjunction:
    """Parse a dependency expression.

    Args:
        expression: The expression text, e.g. ``a|b,c``.

    Raises:
        SchemaDeclarationError: If the expression, one of its groups or one of the names is empty.

    Returns:
        The parsed expression.
    """
    if not expression.strip():
        raise SchemaDeclarationError("Empty dependency expression")
    groups = []
    for group_text in expression.split(AND_SEPARATOR):
        names = tuple(name.strip() for name in group_text.split(OR_SEPARATOR))
        if not all(names):
            raise SchemaDeclarationError(f"Empty name in dependency expression {expression!r}")
        groups.append(Alternation(names=names))
    return Conjunction(groups=tuple(groups))
