# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""The CLI entrypoint for checking Manila share OpenStack options."""

import importlib.metadata
import json
import logging
import sys
from pathlib import Path

import click
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.config.config_exception import ConfigException
from pydantic import ValidationError

from manila_share_options.errors import ShareOptionsError
from manila_share_options.openstack_options import OpenStackOptions, build_validator
from manila_share_options.secrets import (
    KubernetesSecretSource,
    SecretReference,
    SecretSource,
    YamlFileSecretSource,
)

version = importlib.metadata.version("manila-share-options")

logger = logging.getLogger(__name__)


def _build_core_api(kubeconfig: Path | None) -> k8s_client.CoreV1Api:
    """Build the Kubernetes core API client.

    In-cluster configuration is preferred unless a kubeconfig file is given.

    Args:
        kubeconfig: The kubeconfig file path.

    Returns:
        The Kubernetes core API client.
    """
    if kubeconfig is not None:
        k8s_config.load_kube_config(config_file=str(kubeconfig))
    else:
        try:
            k8s_config.load_incluster_config()
        except ConfigException:
            logger.debug("Not running in a cluster, loading default kubeconfig")
            k8s_config.load_kube_config()
    return k8s_client.CoreV1Api()


@click.command()
@click.option(
    "--secret-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file holding the parameters as a flat mapping.",
)
@click.option(
    "--secret-name",
    type=str,
    default=None,
    help="Name of the Kubernetes Secret holding the parameters.",
)
@click.option(
    "--namespace",
    type=str,
    default="default",
    show_default=True,
    help="Namespace of the Kubernetes Secret.",
)
@click.option(
    "--kubeconfig",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="The kubeconfig file. In-cluster configuration is used if not set.",
)
@click.option(
    "--log-level",
    type=click.Choice(
        [
            "CRITICAL",
            "FATAL",
            "ERROR",
            "WARNING",
            "INFO",
            "DEBUG",
        ]
    ),
    default="INFO",
    help="The log level for the application.",
)
def main(
    secret_file: Path | None,
    secret_name: str | None,
    namespace: str,
    kubeconfig: Path | None,
    log_level: str,
) -> None:
    """Validate OpenStack options of a Manila share backend and print a masked summary.

    Args:
        secret_file: YAML file holding the parameters.
        secret_name: Name of the Kubernetes Secret holding the parameters.
        namespace: Namespace of the Kubernetes Secret.
        kubeconfig: The kubeconfig file.
        log_level: The log level.

    Raises:
        UsageError: If not exactly one parameter source is given.
        ClickException: If the secret reference, the Kubernetes configuration or the parameters
            are invalid, or the parameters cannot be read.
    """
    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    logging.info("Starting manila share options check version: %s", version)

    if (secret_file is None) == (secret_name is None):
        raise click.UsageError("Exactly one of --secret-file or --secret-name is required.")

    try:
        secret_ref = SecretReference(
            namespace=namespace, name=secret_file.name if secret_file else secret_name
        )
    except ValidationError as exc:
        raise click.ClickException(f"Invalid secret reference: {exc}") from exc

    source: SecretSource
    if secret_file is not None:
        source = YamlFileSecretSource(secret_file)
    else:
        try:
            source = KubernetesSecretSource(_build_core_api(kubeconfig))
        except ConfigException as exc:
            logger.error("Failed to load Kubernetes configuration: %s", exc)
            raise click.ClickException(f"Invalid Kubernetes configuration: {exc}") from exc

    try:
        opts = OpenStackOptions.from_source(source, secret_ref, validator=build_validator())
    except ShareOptionsError as exc:
        raise click.ClickException(f"Invalid share options in {secret_ref}: {exc}") from exc

    summary = {
        "auth_flow": "trust" if opts.uses_trust else "password",
        "parameters": opts.masked(),
    }
    click.echo(json.dumps(summary, indent=2, sort_keys=True))
