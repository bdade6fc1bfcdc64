"""
clientgen — CLI entrypoint.

Usage:
    clientgen --help
    clientgen generate
    clientgen generate --spec api/openapi.yaml --language python --output build/client
    clientgen check
    clientgen config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from clientgen import __version__
from clientgen.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="clientgen")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to clientgen.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """clientgen — regenerate an API client from an OpenAPI document."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get("CLIENTGEN_LOG_FILE"),
        log_file_level=os.environ.get("CLIENTGEN_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.option("--spec", "-i", default=None, help="OpenAPI document to generate from.")
@click.option("--output", "-o", default=None, help="Output directory (must not exist).")
@click.option("--language", "-g", default=None, help="Generator target language (e.g. rust).")
@click.option("--image", default=None, help="Generator container image.")
@click.option("--runtime", type=click.Choice(["docker", "podman"]), default=None, help="Container runtime.")
@click.option(
    "--generator",
    "kind",
    type=click.Choice(["container", "local"]),
    default=None,
    help="Run the generator in a container or from a local CLI.",
)
@click.option("--timeout", type=click.IntRange(min=0), default=None, help="Generator timeout in seconds (0 = none).")
@click.option("--as-user/--as-root", "as_user", default=None, help="Run the container as the invoking user.")
@click.option(
    "--permissions",
    "strategy",
    type=click.Choice(["chmod", "chown", "none"]),
    default=None,
    help="How to hand the output back to the invoking user.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--dry-run", is_flag=True, help="Validate and print the command without running it.")
@click.option("--mock", is_flag=True, help="Use the mock generator (no external process).")
@click.pass_context
def generate(
    ctx: click.Context,
    spec: str | None,
    output: str | None,
    language: str | None,
    image: str | None,
    runtime: str | None,
    kind: str | None,
    timeout: int | None,
    as_user: bool | None,
    strategy: str | None,
    as_json: bool,
    dry_run: bool,
    mock: bool,
) -> None:
    """Generate the client: prepare output, run the generator, fix permissions.

    Examples:

        clientgen generate

        clientgen generate -i openai.yaml -g rust -o tmp

        clientgen generate --as-user --permissions none
    """
    from clientgen.core.use_cases.generate import run_generate

    overrides = {
        "spec": spec,
        "output": output,
        "language": language,
        "generator.image": image,
        "generator.runtime": runtime,
        "generator.kind": kind,
        "generator.timeout": timeout,
        "generator.run_as_invoking_user": as_user,
        "permissions.strategy": strategy,
    }

    result = run_generate(
        config_path=ctx.obj.get("config_path"),
        overrides=overrides,
        dry_run=dry_run,
        mock_mode=mock,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    quiet = ctx.obj.get("quiet", False)
    for warning in result.warnings:
        click.secho(f"⚠️  {warning}", fg="yellow", err=True)

    report = result.report
    if report is not None and report.command and (dry_run or ctx.obj.get("verbose")):
        click.echo(f"$ {' '.join(report.command)}")

    if result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)
        if result.stderr and result.stderr != result.error:
            click.echo(result.stderr, err=True)
        sys.exit(result.exit_code)

    assert report is not None
    assert result.invocation is not None
    inv = result.invocation

    if dry_run:
        click.secho("✅ Dry run OK — nothing was written", fg="green")
        return

    if quiet:
        return

    mode_label = "[mock] " if mock else ""
    click.secho(f"\n⚡ {mode_label}{inv.target_language} client → {inv.output_dir}", fg="cyan", bold=True)
    for receipt in report.receipts:
        timing = f" ({receipt.duration_ms}ms)" if receipt.duration_ms else ""
        if receipt.ok:
            click.secho(f"   ✓ {receipt.step}", fg="green", nl=False)
            click.echo(f"{timing}  {receipt.output.splitlines()[-1] if receipt.output else ''}")
        else:
            click.secho(f"   ⊘ {receipt.step} ", fg="yellow", nl=False)
            click.echo(f"({receipt.output})")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--mock", is_flag=True, help="Check against the mock generator.")
@click.pass_context
def check(ctx: click.Context, as_json: bool, mock: bool) -> None:
    """Check the environment: runtime, daemon, spec, workspace, privilege."""
    from clientgen.core.config.loader import ConfigError
    from clientgen.core.observability.health import check_system_health
    from clientgen.core.use_cases.generate import prepare_run

    try:
        prepared = prepare_run(config_path=ctx.obj.get("config_path"), mock_mode=mock)
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    health = check_system_health(prepared.invocation, prepared.generator, prepared.normalizer)

    if as_json:
        click.echo(json.dumps(health.to_dict(), indent=2))
        sys.exit(0 if health.runnable else 1)

    status_icons = {
        "healthy": ("💚", "green"),
        "degraded": ("🟡", "yellow"),
        "unhealthy": ("🔴", "red"),
        "unknown": ("❔", "white"),
    }
    icon, color = status_icons.get(health.status, ("❔", "white"))

    click.echo()
    click.secho(f"{icon} Environment: {health.status.upper()}", fg=color, bold=True)
    click.echo()
    for component in health.components:
        c_icon, c_color = status_icons.get(component.status, ("❔", "white"))
        click.secho(f"   {c_icon} {component.name}", fg=c_color, bold=True)
        click.echo(f"      {component.message}")
        if ctx.obj.get("verbose") and component.details:
            for key, val in component.details.items():
                click.echo(f"      {key}: {val}")
    click.echo()

    if not health.runnable:
        sys.exit(1)


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate clientgen.yml."""
    from clientgen.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None
        cfg = result.config
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Config:    {result.config_path or '(defaults)'}")
        click.echo(f"   Spec:      {cfg.spec}")
        click.echo(f"   Output:    {cfg.output}")
        click.echo(f"   Language:  {cfg.language}")
        click.echo(f"   Generator: {cfg.generator.kind} ({cfg.generator.runtime} {cfg.generator.image})")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


if __name__ == "__main__":
    cli()
