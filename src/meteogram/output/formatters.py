"""Meteogram output formatters: Rich table, JSON, CSV."""

from __future__ import annotations

import csv
import io
import json

from rich.console import Console
from rich.table import Table

from meteogram.common.types import hpa_to_inhg, kmh_to_knots
from meteogram.weather.models import Isoline, Meteogram, Profile

# Units of each family's threshold values
_FAMILY_UNITS = {
    "freezing_level": "°C",
    "isotherms": "°C",
    "isotachs": "kt",
    "dew_point_depression": "°C",
}


def _altitude_span(line: Isoline) -> tuple[float, float]:
    altitudes = [p.altitude_ft for p in line.points]
    return min(altitudes), max(altitudes)


def format_table(meteogram: Meteogram, console: Console | None = None) -> None:
    """Print a summary table of every isoline, grouped by family."""
    if console is None:
        console = Console()

    families = meteogram.isolines.families()
    if not any(families.values()):
        console.print("[yellow]No isolines found for this forecast.[/yellow]")
        return

    start = meteogram.series[0].date.strftime("%Y-%m-%d %H:%M") if meteogram.series else "?"
    table = Table(
        title=f"Isolines: {meteogram.model} @ {meteogram.location}",
        caption=f"{meteogram.n_times} time step(s) from {start} (local)",
        show_lines=False,
    )
    table.add_column("Family", style="bold", width=20)
    table.add_column("Value", justify="right", width=8)
    table.add_column("Steps", justify="right", width=11)
    table.add_column("Points", justify="right", width=6)
    table.add_column("Altitude (ft)", justify="right", width=17)

    for family, lines in families.items():
        unit = _FAMILY_UNITS[family]
        for line in sorted(lines, key=lambda l: (l.threshold_value, l.points[0].time_index)):
            lo, hi = _altitude_span(line)
            table.add_row(
                family,
                f"{line.threshold_value:g}{unit}",
                f"{line.points[0].time_index}-{line.points[-1].time_index}",
                str(len(line.points)),
                f"{lo:,.0f}-{hi:,.0f}",
            )

    console.print(table)
    total = sum(len(lines) for lines in families.values())
    console.print(f"\n[dim]{total} isoline(s) total[/dim]")


def format_json(meteogram: Meteogram) -> str:
    """Format the meteogram's isolines and per-step freezing levels as JSON."""
    return json.dumps(
        {
            "model": meteogram.model,
            "location": meteogram.location,
            "latitude": meteogram.lat,
            "longitude": meteogram.lon,
            "elevationFt": meteogram.elevation_ft,
            "times": [p.timestamp_ms for p in meteogram.series],
            "freezingLevels": meteogram.freezing_levels,
            "isolines": {
                family: [line.to_dict() for line in lines]
                for family, lines in meteogram.isolines.families().items()
            },
        },
        indent=2,
    )


def format_csv(meteogram: Meteogram) -> str:
    """Format isolines as CSV, one row per point."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["family", "line", "threshold", "time_index", "timestamp_ms", "altitude_ft"])
    for family, lines in meteogram.isolines.families().items():
        for n, line in enumerate(lines):
            for point in line.points:
                writer.writerow([
                    family, n, line.threshold_value, point.time_index,
                    meteogram.series[point.time_index].timestamp_ms,
                    round(point.altitude_ft, 1),
                ])
    return output.getvalue()


def format_profile_table(profile: Profile, console: Console | None = None) -> None:
    """Print one time step's sounding, highest level first."""
    if console is None:
        console = Console()

    if not profile.samples:
        console.print("[yellow]No valid samples at this time step.[/yellow]")
        return

    ground = f"{profile.ground_temp:.1f}°C" if profile.ground_temp is not None else "N/A"
    table = Table(
        title=f"Profile at {profile.date.strftime('%Y-%m-%d %H:%M')}",
        caption=f"Ground temperature {ground}",
    )
    table.add_column("hPa", justify="right", width=5)
    table.add_column("inHg", justify="right", width=6)
    table.add_column("MSL (ft)", justify="right", width=8)
    table.add_column("Span (ft)", justify="right", width=15)
    table.add_column("Cloud", justify="right", width=5)
    table.add_column("Temp", justify="right", width=6)
    table.add_column("Dew", justify="right", width=6)
    table.add_column("Wind", justify="right", width=10)

    for s in reversed(profile.samples):
        cloud_color = "white" if s.cloud_coverage >= 50 else "dim"
        temp_color = "blue" if s.temperature is not None and s.temperature <= 0 else "red"
        temp = f"{s.temperature:.1f}" if s.temperature is not None else "N/A"
        dew = f"{s.dew_point:.1f}" if s.dew_point is not None else "N/A"
        table.add_row(
            f"{s.hpa:g}",
            f"{hpa_to_inhg(s.hpa):.2f}",
            f"{s.msl_ft:,.0f}",
            f"{s.msl_ft_bottom:,.0f}-{s.msl_ft_top:,.0f}",
            f"[{cloud_color}]{s.cloud_coverage:.0f}%[/{cloud_color}]",
            f"[{temp_color}]{temp}[/{temp_color}]",
            dew,
            f"{s.wind_direction:03.0f}@{kmh_to_knots(s.wind_speed):.0f}kt",
        )

    console.print(table)
