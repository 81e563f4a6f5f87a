# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Loader of OpenStack authentication options for Manila shares."""
