from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

_SEVERITY_COLORS = {
    "ok": typer.colors.GREEN,
    "warning": typer.colors.YELLOW,
    "critical": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_sites(sites: List[Dict[str, Any]]) -> None:
    echo_heading("Sites")
    if not sites:
        typer.echo("No sites match.")
        return
    for site in sites:
        typer.echo(
            f"  - {site.get('id')}: {site.get('name')} "
            f"({site.get('lat'):.3f}, {site.get('lon'):.3f}, depth {site.get('depth_m')} m)"
        )


def render_latest(payload: Dict[str, Any]) -> None:
    echo_heading("Latest Reading")
    echo_key_values([("site_id", payload.get("site_id")), ("timestamp", payload.get("timestamp"))])
    values = payload.get("values") or {}
    severities = payload.get("severities") or {}
    typer.echo()
    for key, value in values.items():
        severity = severities.get(key, "ok")
        typer.secho(
            f"  {key:<10} {value:>10.2f}  {severity}",
            fg=_SEVERITY_COLORS.get(severity),
        )


def render_alerts(payload: Dict[str, Any]) -> None:
    echo_heading("Active Alerts")
    echo_key_values([("site_id", payload.get("site_id")), ("timestamp", payload.get("timestamp"))])
    alerts = payload.get("alerts") or []
    typer.echo()
    if not alerts:
        typer.echo("No alerts. All parameters within set thresholds.")
        return
    for alert in alerts:
        severity = alert.get("severity")
        typer.secho(
            f"  - [{severity}] {alert.get('label')}: {alert.get('value'):.2f} {alert.get('unit') or ''}".rstrip(),
            fg=_SEVERITY_COLORS.get(severity),
        )


def render_thresholds(items: List[Dict[str, Any]]) -> None:
    echo_heading("Thresholds")
    for item in items:
        line = (
            f"  {item.get('parameter'):<10} warn={item.get('warning')} "
            f"crit={item.get('critical')} dir={item.get('direction')}"
        )
        if item.get("consistent") is False:
            typer.secho(f"{line} (inverted)", fg=typer.colors.RED)
        else:
            typer.echo(line)


def render_stream(payload: Dict[str, Any]) -> None:
    echo_heading("Stream")
    echo_key_values(
        [
            ("streaming", payload.get("streaming")),
            ("interval_seconds", payload.get("interval_seconds")),
            ("tick_count", payload.get("tick_count")),
        ]
    )
