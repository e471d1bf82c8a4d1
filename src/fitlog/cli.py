"""Command-line front end for the fitlog session tracker."""

from __future__ import annotations

import asyncio
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import click
import httpx

from .config import Config
from .display import excerpt, format_date, shows_source_badge, source_label
from .errors import AuthError, ConfigError
from .firebase_auth import FirebaseIdentityProvider
from .forms import (
    CALORIE_QUICK_PICKS,
    CUSTOM_ENTRY,
    CUSTOM_GOAL,
    DEFAULT_GOAL,
    DEFAULT_SOURCE,
    DURATION_QUICK_PICKS,
    GOAL_OPTIONS,
    OTHER_SOURCE,
    SOURCE_OPTIONS,
    ProfileForm,
    SessionForm,
    decompose_choice,
    format_number,
)
from .identity import TOKEN_COOKIE, UID_COOKIE, credential_cookies, gate_request
from .logging import setup_logging
from .models import DEFAULT_INTENSITY, INTENSITIES, Session
from .pages import (
    load_edit_form,
    load_profile_form,
    load_session,
    load_sessions,
    remove_session,
    submit_new_session,
    submit_profile,
    submit_session_edit,
)
from .presets import SESSION_PRESETS
from .rest_client import SessionStore
from .stats import bmi

PRESET_CHOICES = [preset.id for preset in SESSION_PRESETS] + [CUSTOM_ENTRY]


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _config(obj: dict) -> Config:
    config = obj.get("config")
    if config is None:
        _fail(obj.get("config_error") or "configuration unavailable")
    return config


def _uid(obj: dict) -> str:
    uid = obj.get("uid")
    if not uid:
        _fail("Not signed in. Set FITLOG_USER_ID (see `fitlog login`).")
    return uid


@asynccontextmanager
async def _open_store(obj: dict, config: Config) -> AsyncIterator[SessionStore]:
    async with httpx.AsyncClient(
        base_url=config.rest_base,
        timeout=config.request_timeout_seconds,
        transport=obj.get("transport"),
    ) as client:
        yield SessionStore(config, token=obj.get("token"), client=client)


def _with_store(obj: dict, handler):
    uid = _uid(obj)
    config = _config(obj)

    async def runner():
        async with _open_store(obj, config) as store:
            return await handler(store, uid)

    return asyncio.run(runner())


def _echo_session_line(session: Session) -> None:
    parts = [
        session.id,
        format_date(session.date),
        session.title,
        f"{session.duration} min",
    ]
    if session.intensity:
        parts.append(session.intensity)
    if session.calories_burned is not None:
        parts.append(f"{format_number(session.calories_burned)} kcal")
    if shows_source_badge(session.source):
        parts.append(session.source)
    click.echo("  ".join(parts))
    if session.description:
        click.echo(f"    {excerpt(session.description)}")


def _apply_session_options(
    form: SessionForm,
    *,
    preset: str | None,
    title: str | None,
    session_date: str | None,
    duration: int | None,
    calories: str | None,
    intensity: str | None,
    source: str | None,
    description: str | None,
) -> None:
    if preset:
        form.select(preset)
    if title is not None:
        form.title = title
    if session_date is not None:
        form.date = session_date
    if duration is not None:
        form.duration = duration
    if calories is not None:
        form.calories = calories
    if intensity is not None:
        form.intensity = intensity
    if source is not None:
        form.source, form.other_source = decompose_choice(
            source, SOURCE_OPTIONS, OTHER_SOURCE, DEFAULT_SOURCE,
        )
    if description is not None:
        form.description = description


def session_options(func):
    options = [
        click.option("--preset", type=click.Choice(PRESET_CHOICES), help="Pre-fill from a preset (or 'custom' to reset)."),
        click.option("--title", type=str, help="Session title."),
        click.option("--date", "session_date", type=str, help="Session date (YYYY-MM-DD)."),
        click.option("--duration", type=click.IntRange(min=1), help="Duration in minutes."),
        click.option("--calories", type=str, help="Calories burned (blank to clear)."),
        click.option("--intensity", type=click.Choice(INTENSITIES, case_sensitive=False), help="Session intensity."),
        click.option("--source", type=str, help="Program / source; unknown values are stored verbatim, empty resets to Manual entry."),
        click.option("--description", type=str, help="Free-text notes."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--user", "uid", envvar="FITLOG_USER_ID", help="Owner identifier of the signed-in user.")
@click.option("--token", envvar="FITLOG_TOKEN", help="Bearer credential of the signed-in user.")
@click.pass_context
def main(ctx: click.Context, uid: str | None, token: str | None):
    """fitlog: log and review workout sessions."""
    obj = ctx.ensure_object(dict)
    obj.setdefault("uid", uid)
    obj.setdefault("token", token)
    if "config" not in obj:
        try:
            obj["config"] = Config.from_env()
        except ConfigError as exc:
            obj["config"] = None
            obj["config_error"] = str(exc)
    config = obj["config"]
    setup_logging(
        config.log_format if config else "text",
        config.log_level if config else "WARNING",
    )


@main.command()
def presets():
    """List the built-in session presets."""
    for preset in SESSION_PRESETS:
        click.echo(f"{preset.id}: {preset.label}")
        click.echo(f"  Title: {preset.title}")
        click.echo(f"  Duration: {preset.duration} min")
        click.echo(f"  Calories: {preset.calories}")
        click.echo(f"  Intensity: {preset.intensity}")
        click.echo(f"  Source: {preset.source}")
        click.echo()
    click.echo(f"Duration quick picks: {', '.join(str(v) for v in DURATION_QUICK_PICKS)}")
    click.echo(f"Calorie quick picks: {', '.join(str(v) for v in CALORIE_QUICK_PICKS)}")


@main.command("bmi")
@click.argument("height_cm")
@click.argument("weight_kg")
def bmi_command(height_cm: str, weight_kg: str):
    """Compute BMI from HEIGHT_CM and WEIGHT_KG."""
    reading = bmi(height_cm, weight_kg)
    if reading is None:
        _fail("height and weight must be positive numbers")
    click.echo(f"BMI {reading.display} ({reading.category})")


@main.command()
@click.argument("path")
@click.option("--cookie-token", default="", help="Value of the credential cookie, if any.")
def gate(path: str, cookie_token: str):
    """Show whether a request for PATH would be let through."""
    redirect = gate_request(path, {TOKEN_COOKIE: cookie_token})
    click.echo(f"redirect {redirect}" if redirect else "allow")


@main.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@click.option("--sign-up", is_flag=True, help="Create the account instead of signing in.")
@click.pass_obj
def login(obj: dict, email: str, password: str, sign_up: bool):
    """Sign in and print the environment for subsequent commands."""
    config = _config(obj)
    if not config.firebase_api_key:
        _fail("FITLOG_FIREBASE_API_KEY must be set")

    async def runner():
        async with httpx.AsyncClient(transport=obj.get("auth_transport")) as client:
            provider = FirebaseIdentityProvider(config.firebase_api_key, client=client)
            if sign_up:
                await provider.sign_up(email, password)
            else:
                await provider.sign_in(email, password)
            user = provider.current
            return credential_cookies(user, await user.get_token())

    try:
        cookies = asyncio.run(runner())
    except AuthError as exc:
        _fail(str(exc))
    token, max_age = cookies[TOKEN_COOKIE]
    click.echo(f"export FITLOG_USER_ID={cookies[UID_COOKIE][0]}")
    click.echo(f"export FITLOG_TOKEN={token}")
    click.echo(f"# token expires in {max_age // 60} minutes")


@main.group()
def sessions():
    """Create, edit and review sessions."""


@sessions.command("list")
@click.pass_obj
def list_sessions(obj: dict):
    """List sessions with totals."""
    page = _with_store(obj, load_sessions)
    if page.error:
        _fail(page.error)
    if not page.items:
        click.echo("No sessions logged yet. Start by importing a preset or create one manually.")
    for session in page.items:
        _echo_session_line(session)
    click.echo()
    click.echo(f"Sessions: {page.stats.total_sessions}")
    click.echo(f"Total minutes: {page.stats.total_minutes}")
    click.echo(f"Calories (last 7 days): {format_number(page.stats.weekly_calories)}")


@sessions.command("show")
@click.argument("session_id")
@click.pass_obj
def show_session(obj: dict, session_id: str):
    """Show a single session."""
    result = _with_store(obj, lambda store, uid: load_session(store, uid, session_id))
    if result.error:
        _fail(result.error)
    session = result.value
    if session is None:
        _fail("Session not found")
    click.echo(session.title)
    click.echo(f"Date: {format_date(session.date, long=True)}")
    click.echo(f"Duration: {session.duration} min")
    click.echo(f"Intensity: {session.intensity or DEFAULT_INTENSITY}")
    if session.calories_burned is not None:
        click.echo(f"Calories: {format_number(session.calories_burned)}")
    click.echo(f"Source: {source_label(session.source)}")
    if session.description:
        click.echo()
        click.echo(session.description)


@sessions.command("add")
@session_options
@click.pass_obj
def add_session(obj: dict, **options):
    """Log a new session."""
    form = SessionForm.blank()
    _apply_session_options(form, **options)
    result = _with_store(obj, lambda store, uid: submit_new_session(store, uid, form))
    if result.error:
        _fail(result.error)
    click.echo(f"Saved session {result.value.id}")


@sessions.command("edit")
@click.argument("session_id")
@session_options
@click.pass_obj
def edit_session(obj: dict, session_id: str, **options):
    """Edit an existing session."""

    async def handler(store: SessionStore, uid: str):
        loaded = await load_edit_form(store, uid, session_id)
        if not loaded.ok:
            return loaded
        form = loaded.value
        _apply_session_options(form, **options)
        return await submit_session_edit(store, uid, session_id, form)

    result = _with_store(obj, handler)
    if result.error:
        _fail(result.error)
    click.echo(f"Updated session {result.value.id}")


@sessions.command("delete")
@click.argument("session_id")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def delete_session(obj: dict, session_id: str, yes: bool):
    """Delete a session."""
    if not yes and not click.confirm("Delete this session?"):
        return
    result = _with_store(obj, lambda store, uid: remove_session(store, uid, session_id))
    if result.error:
        _fail(result.error)
    click.echo(f"Deleted session {session_id}")


@main.group()
def profile():
    """Body metrics and training goal."""


@profile.command("show")
@click.pass_obj
def show_profile(obj: dict):
    """Show the profile with its BMI."""
    result = _with_store(obj, load_profile_form)
    if result.error:
        _fail(result.error)
    form = result.value
    click.echo(f"Height: {form.height or '-'} cm")
    click.echo(f"Weight: {form.weight or '-'} kg")
    click.echo(f"Goal: {form.resolved_goal or '-'}")
    reading = form.bmi()
    if reading is not None:
        click.echo(f"BMI: {reading.display} ({reading.category})")


@profile.command("set")
@click.option("--height", type=str, help="Height in cm (blank to clear).")
@click.option("--weight", type=str, help="Weight in kg (blank to clear).")
@click.option("--goal", type=str, help=f"Training goal; one of {', '.join(GOAL_OPTIONS[:-1])} or free text.")
@click.pass_obj
def set_profile(obj: dict, height: str | None, weight: str | None, goal: str | None):
    """Update height, weight or goal."""

    async def handler(store: SessionStore, uid: str):
        loaded = await load_profile_form(store, uid)
        if not loaded.ok:
            return loaded
        form: ProfileForm = loaded.value
        if height is not None:
            form.height = height
        if weight is not None:
            form.weight = weight
        if goal is not None:
            form.goal_choice, form.custom_goal = decompose_choice(
                goal, GOAL_OPTIONS, CUSTOM_GOAL, DEFAULT_GOAL,
            )
        return await submit_profile(store, uid, form)

    result = _with_store(obj, handler)
    if result.error:
        _fail(result.error)
    click.echo(result.message)


if __name__ == "__main__":
    main()
