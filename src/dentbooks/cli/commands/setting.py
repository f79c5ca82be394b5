"""Settings commands."""

import json

import click

from dentbooks.domain.settings import SettingService


def _parse_value(raw: str):
    """Interpret a value as JSON when possible, else keep it as a string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@click.group()
def setting_group():
    """Read and write stored preferences."""
    pass


@setting_group.command("get")
@click.argument("key")
@click.pass_context
def get_setting(ctx, key: str):
    """Print a setting value."""
    service = SettingService(ctx.obj["db"])

    missing = object()
    value = service.get(key, missing)
    if value is missing:
        click.echo(f"Error: Setting '{key}' not found", err=True)
        ctx.exit(1)
    click.echo(json.dumps(value))


@setting_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_setting(ctx, key: str, value: str):
    """Store a setting. VALUE is parsed as JSON when it is valid JSON.

    Examples:
        dentbooks setting set currency USD
        dentbooks setting set fiscalYear 2024
    """
    service = SettingService(ctx.obj["db"])
    service.set(key, _parse_value(value))
    click.echo(f"Set {key}")


@setting_group.command("list")
@click.pass_context
def list_settings(ctx):
    """List all settings."""
    service = SettingService(ctx.obj["db"])

    settings = service.list_settings()
    if not settings:
        click.echo("No settings stored. Run 'dentbooks init'.")
        return

    for setting in settings:
        click.echo(f"{setting.key:<20s} {json.dumps(setting.value)}")


def register_commands(cli):
    """Register setting commands with main CLI."""
    cli.add_command(setting_group, name="setting")
