# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Declarative validation of flat parameter maps."""

from manila_share_options.validator.schema import FieldSchema  # noqa: F401
from manila_share_options.validator.validator import Validator  # noqa: F401
