"""Che deployment commands.

This module provides the ``deploy`` command that installs or upgrades Che
and the ``history`` command that shows the release's revisions.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from che_deployer.config import InstallationConfig, load_config, merge_overrides
from che_deployer.deployment.errors import DeploymentError
from che_deployer.deployment.helm_deployer import HelmDeployer

from .console import configure_logging, console, with_error_handling

APP_NAME = "che-deployer"


def _get_deployer() -> HelmDeployer:
    """Get the Helm deployer bound to the shared console."""
    return HelmDeployer(console.console)


def _default_cache_dir() -> Path:
    return Path(typer.get_app_dir(APP_NAME)) / "cache"


def _resolve_config(config_file: Path | None, **overrides: object) -> InstallationConfig:
    """Load the config file (if any) and apply command-line overrides.

    The chart is staged under the per-user app directory unless the file or
    the command line chooses another cache directory.
    """
    try:
        config = load_config(config_file)
        if overrides.get("cache_dir") is None and "cache_dir" not in config.model_fields_set:
            overrides["cache_dir"] = _default_cache_dir()
        return merge_overrides(config, overrides)
    except (ValueError, FileNotFoundError) as exc:
        raise DeploymentError("Invalid installation configuration", details=str(exc)) from exc


ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="YAML file with a top-level 'config:' key"),
]
NamespaceOption = Annotated[
    str | None, typer.Option("--namespace", "-n", help="Kubernetes namespace for Che")
]
ReleaseOption = Annotated[str | None, typer.Option("--release", help="Helm release name")]
VerboseOption = Annotated[
    bool, typer.Option("--verbose", "-v", help="Show debug logging on stderr")
]


@with_error_handling
def deploy(
    config_file: ConfigOption = None,
    namespace: NamespaceOption = None,
    release: ReleaseOption = None,
    che_image: Annotated[
        str | None, typer.Option("--che-image", "-i", help="Che server container image")
    ] = None,
    domain: Annotated[
        str | None, typer.Option("--domain", "-b", help="Ingress domain")
    ] = None,
    multiuser: Annotated[
        bool | None, typer.Option("--multiuser/--no-multiuser", help="Multi-user mode")
    ] = None,
    tls: Annotated[
        bool | None, typer.Option("--tls/--no-tls", help="Enable TLS via cert-manager")
    ] = None,
    devfile_registry_url: Annotated[
        str | None, typer.Option("--devfile-registry-url", help="Devfile registry URL")
    ] = None,
    plugin_registry_url: Annotated[
        str | None, typer.Option("--plugin-registry-url", help="Plugin registry URL")
    ] = None,
    templates: Annotated[
        Path | None,
        typer.Option("--templates", "-t", help="Templates directory holding kubernetes/helm/che"),
    ] = None,
    cache_dir: Annotated[
        Path | None, typer.Option("--cache-dir", help="Directory the chart is staged in")
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """🚀 Install or upgrade Che on the current Kubernetes cluster."""
    configure_logging(verbose)
    config = _resolve_config(
        config_file,
        namespace=namespace,
        release_name=release,
        che_image=che_image,
        domain=domain,
        multiuser=multiuser,
        tls=tls,
        devfile_registry_url=devfile_registry_url,
        plugin_registry_url=plugin_registry_url,
        templates=templates,
        cache_dir=cache_dir,
    )

    console.print_header(f"Deploying Che to namespace {config.namespace}")
    _get_deployer().deploy(config)
    console.ok(f"Che release '{config.release_name}' deployed")


@with_error_handling
def history(
    config_file: ConfigOption = None,
    release: ReleaseOption = None,
    verbose: VerboseOption = False,
) -> None:
    """📜 Show the revision history of the Che Helm release."""
    configure_logging(verbose)
    config = _resolve_config(config_file, release_name=release)

    entries = _get_deployer().show_history(config)
    if not entries:
        console.warn(f"Release '{config.release_name}' has no history")
        return

    table = Table(title=f"Release {config.release_name}")
    table.add_column("Revision", style="cyan")
    table.add_column("Status")
    table.add_column("Chart")
    table.add_column("Updated", style="dim")
    table.add_column("Description")
    for entry in entries:
        table.add_row(
            entry.revision, entry.status, entry.chart, entry.updated, entry.description
        )
    console.print(table)
