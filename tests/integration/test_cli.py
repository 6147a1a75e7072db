from __future__ import annotations

from pathlib import Path

import numpy as np
import yaml
from typer.testing import CliRunner

from collectpoints.cli.main import app
from collectpoints.config import load_settings


def _write_session(path: Path, output: dict) -> None:
    config = {
        "frames": [
            {"name": "reference", "xyz": [0.0, 0.0, 10.0]},
            {"name": "stylus", "parent": "reference"},
        ],
        "sampling_frame": "stylus",
        "anchor_frame": "reference",
        "collection": {"mode": "automatic", "minimum_distance_mm": 15.0, "label_base": "F"},
        "motion": {
            "kind": "polyline",
            "waypoints": [[0.0, 0.0, 0.0], [0.0, 40.0, 0.0]],
            "speed_mm_s": 10.0,
            "rate_hz": 1.0,
        },
        "output": output,
    }
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f)


def test_cli_collect_csv(tmp_path: Path) -> None:
    cfg_path = tmp_path / "session.yaml"
    _write_session(cfg_path, {"path": "fiducials.csv", "format": "csv"})

    runner = CliRunner()
    result = runner.invoke(app, ["collect", str(cfg_path)])
    assert result.exit_code == 0, result.stdout
    # 10 mm steps against a 15 mm gate: y = 0, 20, 40
    assert "Collected 3 points in 5 steps" in result.stdout

    out_path = tmp_path / "fiducials.csv"
    with open(out_path, "r", encoding="utf-8") as f:
        lines = [line.strip() for line in f.readlines()]
    assert lines[0] == "label,x,y,z"
    assert [line.split(",")[0] for line in lines[1:]] == ["F0", "F1", "F2"]


def test_cli_collect_with_overrides(tmp_path: Path) -> None:
    cfg_path = tmp_path / "session.yaml"
    _write_session(cfg_path, {"kind": "model", "path": "cloud.ply", "format": "ply"})

    override_path = tmp_path / "cloud.npz"
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["collect", str(cfg_path), "--output", str(override_path), "--mode", "manual", "--log-level", "DEBUG"],
    )
    assert result.exit_code == 0, result.stdout
    data = np.load(override_path)
    assert data["xyz"].shape == (5, 3)
    np.testing.assert_allclose(data["xyz"][:, 1], [0.0, 10.0, 20.0, 30.0, 40.0])


def test_cli_collect_rejects_unknown_mode(tmp_path: Path) -> None:
    cfg_path = tmp_path / "session.yaml"
    _write_session(cfg_path, {"path": "fiducials.csv"})

    runner = CliRunner()
    result = runner.invoke(app, ["collect", str(cfg_path), "--mode", "sometimes"])
    assert result.exit_code != 0
    assert not (tmp_path / "fiducials.csv").exists()


def test_cli_collect_rejects_bad_output_extension(tmp_path: Path) -> None:
    cfg_path = tmp_path / "session.yaml"
    _write_session(cfg_path, {"path": "fiducials.csv"})

    runner = CliRunner()
    result = runner.invoke(app, ["collect", str(cfg_path), "--output", str(tmp_path / "out.txt")])
    assert result.exit_code != 0


def test_cli_settings_init_and_show(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.yaml"
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["settings", "init", str(settings_path), "--label-base", "Fid-", "--minimum-distance-mm", "2.5", "--mode", "automatic"],
    )
    assert result.exit_code == 0, result.stdout
    assert settings_path.exists()

    settings = load_settings(settings_path)
    assert settings.label_base == "Fid-"
    assert settings.minimum_distance_mm == 2.5
    assert settings.mode == "automatic"
    assert settings.label_counter == 0

    result = runner.invoke(app, ["settings", "show", str(settings_path)])
    assert result.exit_code == 0, result.stdout
    assert "label_base: Fid-" in result.stdout
    assert "mode: automatic" in result.stdout


def test_cli_settings_init_rejects_negative_distance(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.yaml"
    runner = CliRunner()
    result = runner.invoke(app, ["settings", "init", str(settings_path), "--minimum-distance-mm", "-1"])
    assert result.exit_code != 0
    assert not settings_path.exists()
