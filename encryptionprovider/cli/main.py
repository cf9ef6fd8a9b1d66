"""Click entry point for the encryption provider.

Commands:
    run      -- start the service (watcher, sync loop, status API).
    resolve  -- evaluate the coordination protocol offline against a Secret
                manifest and print the group-resources to encrypt.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import click

from encryptionprovider.cache import SecretCache
from encryptionprovider.config import load_config
from encryptionprovider.events.recorder import EventRecorder
from encryptionprovider.models.events import ChangeNotification
from encryptionprovider.models.resources import GroupResource
from encryptionprovider.observability.logging import setup_logging
from encryptionprovider.provider import EncryptionProvider


class _CollectingRecorder(EventRecorder):
    """Keeps events in memory so ``resolve --verbose`` can print them."""

    def __init__(self) -> None:
        self.notifications: list[ChangeNotification] = []

    @property
    def recorder_name(self) -> str:
        return "cli"

    def record(self, notification: ChangeNotification) -> bool:
        self.notifications.append(notification)
        return True


def _parse_grs(values: tuple[str, ...]) -> list[GroupResource]:
    try:
        return [GroupResource.parse(value) for value in values]
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def _load_secret(path: Path) -> dict[str, Any]:
    try:
        obj = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"{path}: not valid JSON ({exc})", param_hint="--secret-file") from exc
    if not isinstance(obj, dict):
        raise click.BadParameter(f"{path}: expected a Secret object", param_hint="--secret-file")
    if not isinstance(obj.get("metadata", {}), dict):
        raise click.BadParameter(f"{path}: metadata must be an object", param_hint="--secret-file")
    return obj


@click.group()
@click.version_option(package_name="encryption-provider")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="error",
    show_default=True,
    help="Log level for commands run by hand; 'run' uses ENCPROVIDER_LOG_LEVEL.",
)
def cli(log_level: str) -> None:
    """Resolve the group-resources the API server operator keeps encrypted."""
    setup_logging(log_level, "console", cache=False)


@cli.command()
def run() -> None:
    """Run the encryption provider service until SIGTERM/SIGINT."""
    from encryptionprovider.app import main

    asyncio.run(main())


@cli.command()
@click.option(
    "--secret-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON manifest of the coordination secret. Omit to simulate 'not found'.",
)
@click.option("--target-namespace", default=None, help="Namespace of the external API server.")
@click.option("--annotation-key", default=None, help="Annotation that keeps this operator in charge.")
@click.option("--gr", "grs", multiple=True, help="Authoritative group-resource (repeatable).")
@click.option("--external", "externals", multiple=True, help="Externally manageable group-resource (repeatable).")
@click.option("--verbose", "-v", is_flag=True, help="Also print the mode and recorded events.")
def resolve(
    secret_file: Path | None,
    target_namespace: str | None,
    annotation_key: str | None,
    grs: tuple[str, ...],
    externals: tuple[str, ...],
    verbose: bool,
) -> None:
    """Print the group-resources to encrypt as a JSON array.

    Unset options fall back to the ENCPROVIDER_* environment configuration.
    """
    try:
        config = load_config().provider
    except ValueError as exc:
        raise click.ClickException(f"invalid configuration: {exc}") from exc

    cache = SecretCache(config.secret_namespace)
    items = [_load_secret(secret_file)] if secret_file is not None else []
    if items:
        # The manifest may omit its namespace; it is read from the secret namespace.
        items[0].setdefault("metadata", {}).setdefault("namespace", config.secret_namespace)
    cache.replace(items)

    recorder = _CollectingRecorder()
    provider = EncryptionProvider(
        target_namespace=target_namespace or config.target_namespace,
        annotation_key=annotation_key or config.annotation_key,
        all_encrypted_grs=_parse_grs(grs or tuple(config.encrypted_grs)),
        external_grs=[str(gr) for gr in _parse_grs(externals or tuple(config.external_grs))],
        secret_lookup=cache,
        event_sink=recorder,
        secret_namespace=config.secret_namespace,
    )

    result = provider.resolve()
    click.echo(json.dumps([str(gr) for gr in result]))
    if verbose:
        click.echo(f"mode: {provider.mode.value}", err=True)
        click.echo(f"secret: {provider.secret_namespace}/{provider.secret_name}", err=True)
        for notification in recorder.notifications:
            click.echo(f"event: {notification.reason}: {notification.message}", err=True)
