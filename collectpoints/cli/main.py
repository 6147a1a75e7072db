from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from ..config import CollectionSettings, load_settings, save_settings
from ..core.collection import DEFAULT_LABEL_BASE, DEFAULT_MINIMUM_DISTANCE_MM
from ..sdk import collect_from_config

app = typer.Typer(help="Collect points from a moving coordinate frame")
settings_app = typer.Typer(help="Collection settings files")
app.add_typer(settings_app, name="settings")

_MODES = {"manual", "automatic"}


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("collectpoints").setLevel(numeric)


@app.command("collect")
def collect(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML session file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (extension sets format)."),
    mode: Optional[str] = typer.Option(None, "--mode", help="Override collection mode (manual or automatic)."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Replay a session's sampling-frame motion and write the collected points."""

    if mode is not None and mode not in _MODES:
        raise typer.BadParameter(f"mode must be one of {sorted(_MODES)}.", param_hint="--mode")
    _configure_logging(log_level)
    try:
        result = collect_from_config(config, output=output, mode=mode)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(
        f"Collected {result.stats['points']} points in {result.stats['steps']} steps → {result.output_path}"
    )


@settings_app.command("show")
def settings_show(
    path: Path = typer.Argument(..., exists=True, readable=True, help="Settings YAML file."),
) -> None:
    """Print the normalized values of a settings file."""

    settings = load_settings(path)
    for key, value in settings.model_dump(mode="json").items():
        typer.echo(f"{key}: {value}")


@settings_app.command("init")
def settings_init(
    path: Path = typer.Argument(..., help="Settings YAML file to write."),
    label_base: str = typer.Option(DEFAULT_LABEL_BASE, "--label-base", help="Prefix for generated labels."),
    minimum_distance_mm: float = typer.Option(DEFAULT_MINIMUM_DISTANCE_MM, "--minimum-distance-mm", help="Automatic-mode distance gate (0 disables)."),
    mode: str = typer.Option("manual", "--mode", help="Collection mode (manual or automatic)."),
) -> None:
    """Write a fresh settings file."""

    if mode not in _MODES:
        raise typer.BadParameter(f"mode must be one of {sorted(_MODES)}.", param_hint="--mode")
    if minimum_distance_mm < 0.0:
        raise typer.BadParameter("minimum distance must be non-negative.", param_hint="--minimum-distance-mm")
    settings = CollectionSettings(mode=mode, label_base=label_base, minimum_distance_mm=minimum_distance_mm)
    save_settings(settings, path)
    typer.echo(f"Wrote settings to {path.resolve()}")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
