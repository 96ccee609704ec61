import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any, TypeVar

import click
import structlog

from teamboard.config import Settings, load_settings
from teamboard.exceptions import ConfigurationError, TeamboardError
from teamboard.export import results_payload, showtime_payload, write_payload
from teamboard.lobby import group_games
from teamboard.models import GameSession, LiveEvent, TeamResult
from teamboard.session import LiveSession
from teamboard.sources.quiz_api_source import QuizApiSource
from teamboard.tasks import task_breakdown

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configures structlog once for the whole process (logs go to stderr)."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _run(ctx: click.Context, work: Callable[[QuizApiSource], Awaitable[T]]) -> T:
    """Runs one async command against a fresh source and closes it afterwards."""
    settings: Settings = ctx.obj["settings"]

    async def _main() -> T:
        source = QuizApiSource(ctx.obj["key"], settings)
        try:
            return await work(source)
        finally:
            await source.aclose()

    try:
        return asyncio.run(_main())
    except TeamboardError as e:
        logger.error("command_failed", **e.to_dict())
        raise click.ClickException(str(e)) from e


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _echo_ranking(results: list[TeamResult]) -> None:
    for team in results:
        accuracy = ""
        if team.correct_answers is not None or team.incorrect_answers is not None:
            correct = team.correct_answers or 0
            answered = correct + (team.incorrect_answers or 0)
            accuracy = f"  {correct}/{answered} correct"
        click.echo(f"#{team.position:<3} {team.name:<30} {team.score:>10g}{accuracy}")


@click.group()
@click.option("--key", envvar="TEAMBOARD_API_KEY", required=True, help="API credential")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="YAML settings file")
@click.option("--log-level", default="INFO", show_default=True)
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
@click.pass_context
def cli(ctx: click.Context, key: str, config_path: str | None, log_level: str, json_logs: bool) -> None:
    """Live results board for team quiz events."""
    configure_logging(log_level, json_logs)
    try:
        settings = load_settings(config_path)
    except ConfigurationError as e:
        raise click.BadParameter(str(e), param_hint="--config") from e
    ctx.obj = {"key": key, "settings": settings}


@cli.command()
@click.option("--as-json", is_flag=True, help="Print raw JSON instead of the lobby view")
@click.pass_context
def games(ctx: click.Context, as_json: bool) -> None:
    """List games grouped into today, planned and completed."""
    found = _run(ctx, lambda source: source.fetch_games())
    if as_json:
        _echo_json([g.to_dict() for g in found])
        return

    grouped = group_games(found)
    for label, items in (
        ("Today", grouped.today),
        ("Planned", grouped.planned),
        ("Completed", grouped.completed),
    ):
        click.echo(f"== {label} ({len(items)} games)")
        for game in items:
            click.echo(f"  {game.id}  {game.name}")


@cli.command()
@click.argument("game_id")
@click.option("--breakdown", is_flag=True, help="Show which teams answered each task")
@click.option("--derive-titles", is_flag=True, help="Title synthetic tasks from answer data")
@click.pass_context
def tasks(ctx: click.Context, game_id: str, breakdown: bool, derive_titles: bool) -> None:
    """Show the reconciled task catalog of a game."""

    async def work(source: QuizApiSource) -> LiveSession:
        session = LiveSession(source, ctx.obj["settings"], derive_titles=derive_titles)
        session.select_game(game_id)
        await session.load()
        return session

    session = _run(ctx, work)
    if not breakdown:
        _echo_json([t.to_dict() for t in session.tasks])
        return

    for item in task_breakdown(session.tasks, session.results or []):
        click.echo(f"[{item.task.type}] {item.task.title} ({item.correct_count} correct)")
        for team, answer in item.entries:
            click.echo(f"    {team.name:<30} {answer.score or 0:>8g}")


@cli.command()
@click.argument("game_id")
@click.option("--as-json", is_flag=True)
@click.pass_context
def results(ctx: click.Context, game_id: str, as_json: bool) -> None:
    """Show the current ranking of a game."""
    snapshot = _run(ctx, lambda source: source.fetch_results(game_id))
    if as_json:
        _echo_json([r.to_dict() for r in snapshot])
    else:
        _echo_ranking(snapshot)


@cli.command()
@click.argument("game_id")
@click.pass_context
def photos(ctx: click.Context, game_id: str) -> None:
    """List the deduplicated photo gallery of a game."""
    gallery = _run(ctx, lambda source: source.fetch_photos(game_id))
    _echo_json([p.to_dict() for p in gallery])


@cli.command()
@click.argument("game_id")
@click.option("--interval", type=float, help="Poll interval in seconds (overrides settings)")
@click.pass_context
def watch(ctx: click.Context, game_id: str, interval: float | None) -> None:
    """Follow a game live and announce incoming answers."""
    settings: Settings = ctx.obj["settings"]
    if interval is not None:
        if interval <= 0:
            raise click.BadParameter("Interval must be positive.", param_hint="--interval")
        settings = replace(settings, poll_interval=interval)

    def announce(event: LiveEvent) -> None:
        click.echo(f">>> {event.message}: {event.subtext}")

    async def work(source: QuizApiSource) -> None:
        session = LiveSession(source, settings)
        session.add_listener(announce)
        session.select_game(game_id)
        await session.load()
        _echo_ranking(session.results or [])

        await session.run(asyncio.Event())

    try:
        _run(ctx, work)
    except KeyboardInterrupt:
        logger.info("watch_stopped", game_id=game_id)


@cli.command()
@click.argument("game_id")
@click.option("--output", required=True, type=click.Path(dir_okay=False), help="Target .json/.yaml file")
@click.option("--kind", type=click.Choice(["results", "showtime"]), default="results", show_default=True)
@click.option("--photo-id", "photo_ids", multiple=True, help="Restrict showtime export to these photos")
@click.pass_context
def export(
    ctx: click.Context, game_id: str, output: str, kind: str, photo_ids: tuple[str, ...]
) -> None:
    """Write a results or showtime payload for outbound delivery."""

    async def work(source: QuizApiSource) -> dict[str, Any]:
        session = LiveSession(source, ctx.obj["settings"])
        session.select_game(game_id)
        await session.load()
        game = session.game or GameSession(id=game_id, name=game_id)
        if kind == "results":
            return results_payload(game, session.results or [])
        gallery = await session.load_photos()
        return showtime_payload(game, gallery, set(photo_ids) or None)

    payload = _run(ctx, work)
    changed = write_payload(payload, output)
    click.echo(f"{'Wrote' if changed else 'Unchanged'}: {output}")


if __name__ == "__main__":
    cli()
