"""CLI helpers for practice resolution."""

from __future__ import annotations

import click

from dentbooks.domain.practice import PracticeService
from dentbooks.domain.settings import SettingService
from dentbooks.utils.practice_resolver import resolve_practice


def resolve_practice_or_exit(
    ctx: click.Context, practice_service: PracticeService, practice: str | int
) -> int:
    """Resolve practice name or ID, or exit with a CLI error."""
    try:
        return resolve_practice(practice_service, practice)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_optional_practice(
    ctx: click.Context, practice: str | None, use_active: bool = True
) -> int | None:
    """Resolve --practice, falling back to the active practice setting.

    Returns None when neither is available, meaning "all practices".
    """
    db = ctx.obj["db"]
    if practice is not None:
        return resolve_practice_or_exit(ctx, PracticeService(db), practice)
    if use_active:
        return SettingService(db).get_active_practice_id()
    return None


def require_practice(ctx: click.Context, practice: str | None) -> int:
    """Resolve --practice or the active practice, exiting if there is neither."""
    practice_id = resolve_optional_practice(ctx, practice)
    if practice_id is None:
        click.echo(
            "Error: No practice given. Pass --practice or run 'dentbooks practice use'.",
            err=True,
        )
        ctx.exit(1)
    return practice_id
