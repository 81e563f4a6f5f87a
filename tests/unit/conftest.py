#  Copyright 2025 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Unit test setups and configurations."""

import pytest

from manila_share_options.openstack_options import OpenStackOptions, build_validator
from manila_share_options.validator import Validator


@pytest.fixture(name="options_validator", scope="module")
def options_validator_fixture() -> Validator[OpenStackOptions]:
    """The validator of OpenStack options, shared across the tests of a module."""
    return build_validator()
