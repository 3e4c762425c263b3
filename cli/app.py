from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import (
    render_alerts,
    render_latest,
    render_sites,
    render_stream,
    render_thresholds,
)
from services.export import to_csv
from services.generator import ReadingGenerator
from services.series import SeriesBuffer
from services.sites import load_sites
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


class StreamAction(str, Enum):
    status = "status"
    start = "start"
    stop = "stop"
    tick = "tick"


app = typer.Typer(
    help="Utilities for interacting with the shellfish environmental monitor.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Monitor API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("sites")
def sites_command(
    ctx: typer.Context,
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Filter by name or id."),
) -> None:
    """List monitoring sites."""
    state = _get_state(ctx)
    render_sites(state.client.list_sites(search))


@app.command("latest")
def latest_command(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site identifier, e.g. PS-ALKI."),
) -> None:
    """Show the latest reading of a site with per-parameter severity."""
    state = _get_state(ctx)
    render_latest(state.client.get_latest(site_id))


@app.command("alerts")
def alerts_command(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site identifier, e.g. PS-ALKI."),
) -> None:
    """Show active alerts for a site, critical first."""
    state = _get_state(ctx)
    render_alerts(state.client.get_alerts(site_id))


@app.command("export")
def export_command(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site identifier, e.g. PS-ALKI."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Destination file (defaults to the server-provided filename).",
    ),
) -> None:
    """Download a site's series as CSV."""
    state = _get_state(ctx)
    filename, text = state.client.export_csv(site_id)
    target = output or Path(filename)
    target.write_text(text, encoding="utf-8")
    rows = max(len(text.splitlines()) - 1, 0)
    typer.secho(f"Wrote {rows} readings to {target}", fg=typer.colors.GREEN)


@app.command("thresholds")
def thresholds_command(ctx: typer.Context) -> None:
    """Show the current alert thresholds."""
    state = _get_state(ctx)
    render_thresholds(state.client.list_thresholds())


@app.command("set-threshold")
def set_threshold_command(
    ctx: typer.Context,
    parameter: str = typer.Argument(..., help="Parameter key, e.g. temp or do."),
    warning: Optional[float] = typer.Option(None, "--warning", "-w", help="New warning level."),
    critical: Optional[float] = typer.Option(None, "--critical", "-c", help="New critical level."),
) -> None:
    """Edit the warning and/or critical level of a parameter."""
    if warning is None and critical is None:
        raise typer.BadParameter("Provide --warning and/or --critical.")
    state = _get_state(ctx)
    render_thresholds([state.client.update_threshold(parameter, warning=warning, critical=critical)])


@app.command("stream")
def stream_command(
    ctx: typer.Context,
    action: StreamAction = typer.Argument(StreamAction.status, help="status, start, stop or tick."),
) -> None:
    """Inspect or toggle the live stream."""
    state = _get_state(ctx)
    payload = state.client.stream(None if action is StreamAction.status else action.value)
    render_stream(payload)


@app.command("simulate")
def simulate_command(
    site_id: Optional[str] = typer.Option(
        None, "--site", help="Site to simulate (defaults to the first configured site)."
    ),
    ticks: int = typer.Option(0, "--ticks", min=0, help="Extra readings appended after the backfill."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible output."),
    interval: int = typer.Option(5, "--interval", min=1, help="Minutes between simulated readings."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", dir_okay=False, help="CSV destination."),
) -> None:
    """Run the simulation offline and emit CSV without a server."""
    settings = get_settings()
    sites = load_sites(settings.sites_path)
    site = next((item for item in sites if site_id in (None, item.id)), None)
    if site is None:
        raise typer.BadParameter(f"Site {site_id} was not found.")

    buffer = SeriesBuffer(
        ReadingGenerator(random.Random(seed)),
        max_length=settings.max_series_length,
        backfill=timedelta(minutes=settings.backfill_minutes),
        interval=timedelta(minutes=interval),
    )
    now = datetime.now(timezone.utc).replace(microsecond=0)
    series_map = buffer.seed_all([site], now)
    for index in range(1, ticks + 1):
        series_map = buffer.advance(series_map, [site], now + index * timedelta(minutes=interval))

    text = to_csv(series_map[site.id])
    if output is None:
        typer.echo(text)
        return
    output.write_text(text, encoding="utf-8")
    typer.secho(f"Wrote {len(series_map[site.id])} readings to {output}", fg=typer.colors.GREEN)
