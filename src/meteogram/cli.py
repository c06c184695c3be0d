"""Typer CLI: meteogram isolines, profile, models, locations."""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="meteogram",
    help="Altitude-time meteogram isolines from Open-Meteo pressure-level forecasts",
    no_args_is_help=True,
)
console = Console()


def _run_pipeline(model: Optional[str], location: Optional[str]):
    from meteogram.pipeline import build_meteogram

    try:
        return asyncio.run(build_meteogram(model, location))
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    except httpx.HTTPStatusError as exc:
        console.print(f"[red]Open-Meteo request rejected: {exc}[/red]")
        raise typer.Exit(code=1)
    except httpx.HTTPError as exc:
        console.print(f"[red]Open-Meteo request failed: {exc}[/red]")
        raise typer.Exit(code=1)


@app.command()
def isolines(
    location: Optional[str] = typer.Argument(
        None, help="Location key (e.g. KCDW), 'Name@lat,lon', or a place name",
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m",
        help="Open-Meteo model name (see `meteogram models`)",
    ),
    output: str = typer.Option(
        "table", "--output", "-o",
        help="Output format: table, json, csv",
    ),
) -> None:
    """Fetch a forecast and list freezing level, isotherms, isotachs and dew-point lines."""
    from meteogram.output.formatters import format_csv, format_json, format_table

    meteogram = _run_pipeline(model, location)

    if output == "json":
        console.print_json(format_json(meteogram))
    elif output == "csv":
        typer.echo(format_csv(meteogram), nl=False)
    else:
        format_table(meteogram, console)


@app.command()
def profile(
    location: Optional[str] = typer.Argument(None, help="Location key, 'Name@lat,lon', or a place name"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Open-Meteo model name"),
    step: int = typer.Option(0, "--step", "-s", help="Forecast time step index"),
) -> None:
    """Show the vertical profile at one forecast time step."""
    from meteogram.output.formatters import format_profile_table

    meteogram = _run_pipeline(model, location)
    if not 0 <= step < meteogram.n_times:
        console.print(f"[red]Step {step} out of range (0-{meteogram.n_times - 1})[/red]")
        raise typer.Exit(code=1)

    format_profile_table(meteogram.series[step], console)
    levels = meteogram.freezing_levels[step]
    if levels:
        console.print(f"  Freezing level(s): {', '.join(f'{h:,.0f} ft' for h in levels)}")
    if meteogram.elevation_ft is not None:
        console.print(f"  Ground elevation: {meteogram.elevation_ft:,.0f} ft")


@app.command()
def models() -> None:
    """List supported forecast models."""
    from meteogram.weather.model_configs import MODEL_CONFIGS

    table = Table(title="Forecast Models")
    table.add_column("Model", no_wrap=True)
    table.add_column("Step")
    table.add_column("Length", justify="right")
    table.add_column("Levels", justify="right")
    table.add_column("Range (hPa)")
    table.add_column("Barbs (steps/levels)", justify="right")
    table.add_column("Isotherm gap", justify="right")

    for name, config in MODEL_CONFIGS.items():
        table.add_row(
            name,
            config.forecast_data_key,
            f"{config.step_size} ({config.step_key.removeprefix('forecast_')})",
            str(len(config.hpa_levels)),
            f"{max(config.hpa_levels)}-{min(config.hpa_levels)}",
            f"{config.wind_barb_step}/{config.wind_barb_pressure_level_step}",
            str(config.max_isotherm_step_distance),
        )

    console.print(table)


@app.command()
def locations() -> None:
    """List predefined locations."""
    from meteogram.weather.locations import LOCATIONS

    table = Table(title="Predefined Locations")
    table.add_column("Key")
    table.add_column("Latitude", justify="right")
    table.add_column("Longitude", justify="right")
    for key, (lat, lon) in LOCATIONS.items():
        table.add_row(key, f"{lat:.5f}", f"{lon:.5f}")
    console.print(table)


if __name__ == "__main__":
    app()
