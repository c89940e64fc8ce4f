"""
aixpkg — CLI entrypoint.

Usage:
    aixpkg --help
    aixpkg install bos.adt.base --source /mnt/lpp/bos.adt.base.bff
    aixpkg check gcc --source https://repo.example.com/gcc-8.3.0-2.aix7.1.ppc.rpm
    aixpkg apply packages.yml
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Callable

import click

from aixpkg import __version__
from aixpkg.core.config.loader import ConfigError, Settings, load_settings
from aixpkg.core.models.action import Receipt
from aixpkg.core.models.package import BackendType, PackageSpec, Verb
from aixpkg.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="aixpkg")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (every command line).")
@click.option("--mock", is_flag=True, help="Use the in-memory backend (no real execution).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to aixpkg.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    mock: bool,
    config_path: str | None,
) -> None:
    """aixpkg — reconcile AIX packages (rpm, emgr, installp, NIM)."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["mock"] = mock

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("AIXPKG_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("AIXPKG_LOG_FILE"),
        log_file_level=os.environ.get("AIXPKG_LOG_FILE_LEVEL"),
    )

    try:
        ctx.obj["settings"] = load_settings(Path(config_path) if config_path else None)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _echo_receipt(receipt: Receipt, verbose: bool) -> None:
    label = f"{receipt.package} [{receipt.backend or '?'}]"
    timing = f" ({receipt.duration_ms}ms)" if receipt.duration_ms else ""
    if receipt.ok:
        kind = receipt.decision.get("kind", "")
        version = receipt.decision.get("target_version", "")
        click.secho(f"   ✓ {label} ", fg="green", nl=False)
        click.echo(f"{kind} {version}".rstrip() + timing)
        if verbose and receipt.output:
            for line in receipt.output.split("\n")[:10]:
                click.echo(f"     │ {line}")
    elif receipt.failed:
        click.secho(f"   ✗ {label}", fg="red", nl=False)
        click.echo(timing)
        for line in (receipt.error or "").split("\n")[:10]:
            click.echo(f"     │ {line}")
    else:
        color = "yellow" if receipt.metadata.get("unsatisfied") else "white"
        click.secho(f"   ⊘ {label} ", fg=color, nl=False)
        click.echo(f"({receipt.output})")


def _make_verb_command(verb: Verb, help_text: str) -> Callable[..., None]:
    @click.argument("name")
    @click.option("--version", "version", default=None, help="Pin this version.")
    @click.option("--source", "-s", default=None, help="Path, URL or NIM lpp_source.")
    @click.option(
        "--type",
        "backend_type",
        type=click.Choice([t.value for t in BackendType if t != BackendType.NONE]),
        default=None,
        help="Backend (default: detect from source).",
    )
    @click.option("--options", default="", help="Extra flags passed to the backend tool.")
    @click.option("--allow-downgrade", is_flag=True, help="Permit installing an older version.")
    @click.option("--only-apply", is_flag=True, help="installp: apply without committing.")
    @click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
    @click.pass_context
    def command(
        ctx: click.Context,
        name: str,
        version: str | None,
        source: str | None,
        backend_type: str | None,
        options: str,
        allow_downgrade: bool,
        only_apply: bool,
        as_json: bool,
    ) -> None:
        from aixpkg.core.use_cases.reconcile import reconcile_package

        spec = PackageSpec(
            name=name,
            version=version,
            source=source,
            backend_type=BackendType(backend_type) if backend_type else None,
            options=options,
            allow_downgrade=allow_downgrade,
            only_apply=only_apply,
        )
        settings: Settings = ctx.obj["settings"]
        receipt = reconcile_package(spec, verb, settings=settings, mock_mode=ctx.obj["mock"])

        if as_json:
            click.echo(json.dumps(receipt.model_dump(mode="json"), indent=2))
        else:
            _echo_receipt(receipt, ctx.obj.get("verbose", False))

        if receipt.failed:
            sys.exit(1)

    command.__doc__ = help_text
    return click.command(str(verb))(command)


cli.add_command(_make_verb_command(Verb.INSTALL, "Install NAME, or change it to the source's version."))
cli.add_command(_make_verb_command(Verb.UPGRADE, "Upgrade NAME to the version its source offers."))
cli.add_command(_make_verb_command(Verb.REMOVE, "Remove NAME if installed."))
cli.add_command(_make_verb_command(Verb.PURGE, "Remove NAME (AIX keeps no separate configuration)."))
cli.add_command(_make_verb_command(Verb.CHECK, "Show what install would do, without doing it."))


@cli.command()
@click.argument("manifest", type=click.Path(exists=False))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def apply(ctx: click.Context, manifest: str, as_json: bool) -> None:
    """Reconcile every package listed in MANIFEST.

    Examples:

        aixpkg apply packages.yml

        aixpkg --mock apply packages.yml --json
    """
    from aixpkg.core.use_cases.reconcile import apply_manifest

    result = apply_manifest(
        Path(manifest),
        settings=ctx.obj["settings"],
        mock_mode=ctx.obj["mock"],
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.status != "ok":
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    mode_label = "[mock] " if ctx.obj["mock"] else ""
    click.secho(f"\n⚡ {mode_label}apply — {manifest}", fg="cyan", bold=True)
    click.echo(f"   Packages: {result.total}")
    click.echo()
    for receipt in result.receipts:
        _echo_receipt(receipt, ctx.obj.get("verbose", False))

    click.echo()
    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}.get(result.status, "white")
    click.secho(
        f"   Result: {result.succeeded}/{result.total} succeeded, {result.changed} changed",
        fg=status_color,
        bold=True,
    )
    click.echo()

    if result.failed:
        sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def health(ctx: click.Context, as_json: bool) -> None:
    """Show platform support and which backends are usable."""
    from aixpkg.core.observability.health import check_system_health
    from aixpkg.core.use_cases.reconcile import build_registry

    settings: Settings = ctx.obj["settings"]
    registry = build_registry(settings, mock_mode=ctx.obj["mock"])
    system_health = check_system_health(
        registry,
        include_platform=settings.check_platform and not ctx.obj["mock"],
    )

    if as_json:
        click.echo(json.dumps(system_health.to_dict(), indent=2))
        return

    status_icons = {
        "healthy": ("💚", "green"),
        "degraded": ("🟡", "yellow"),
        "unhealthy": ("🔴", "red"),
        "unknown": ("❔", "white"),
    }
    icon, color = status_icons.get(system_health.status, ("❔", "white"))

    click.echo()
    click.secho(f"{icon} System Health: {system_health.status.upper()}", fg=color, bold=True)
    click.echo()
    for component in system_health.components:
        c_icon, c_color = status_icons.get(component.status, ("❔", "white"))
        click.secho(f"   {c_icon} {component.name}", fg=c_color, bold=True)
        click.echo(f"      {component.message}")
        if ctx.obj.get("verbose") and component.name == "backends":
            for name, info in component.details.items():
                missing = ", ".join(info.get("missing", [])) or "-"
                click.echo(f"      {name}: available={info['available']} missing={missing}")
    click.echo()


@cli.command()
@click.argument("version1")
@click.argument("version2")
def compare(version1: str, version2: str) -> None:
    """Compare two versions the way the reconciler does (-1, 0, 1)."""
    from aixpkg.core.engine.versions import compare_versions

    click.echo(str(compare_versions(version1, version2)))


if __name__ == "__main__":
    cli()
