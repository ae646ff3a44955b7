"""Tests for the vca command line."""

import json
from datetime import date

import pytest
import typer
from typer.testing import CliRunner

from vca import cli

from tests.conftest import CHANNEL_ID

runner = CliRunner()


def test_parse_group():
    group = cli.parse_group("Phones=phone")
    assert (group.name, group.keyword) == ("Phones", "phone")
    assert cli.parse_group("All").keyword == ""
    with pytest.raises(typer.BadParameter):
        cli.parse_group("=phone")


def test_parse_range():
    dr = cli.parse_range("Q1:2025-01-01:2025-03-31")
    assert dr.label == "Q1"
    assert dr.start_date == date(2025, 1, 1)
    assert dr.end_date == date(2025, 3, 31)
    with pytest.raises(typer.BadParameter):
        cli.parse_range("Q1:2025-01-01")
    with pytest.raises(typer.BadParameter):
        cli.parse_range("Q1:2025-03-01:2025-01-01")


def test_aggregate_command_prints_and_writes_matrix(provider, monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "provider_factory", lambda token: provider)
    out = tmp_path / "matrix.json"
    result = runner.invoke(
        cli.app,
        [
            "aggregate",
            "--channel-id", CHANNEL_ID,
            "--access-token", "ya29.test",
            "--group", "Phones=phone",
            "--group", "All",
            "--range", "Jan:2025-01-01:2025-01-31",
            "--output", str(out),
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Phones" in result.output
    assert "Done." in result.output
    matrix = json.loads(out.read_text(encoding="utf-8"))
    assert matrix["rows"][1]["cells"]["Jan"]["metrics"]["views"] == 60


def test_aggregate_command_rejects_duplicate_range_labels(provider, monkeypatch):
    monkeypatch.setattr(cli, "provider_factory", lambda token: provider)
    result = runner.invoke(
        cli.app,
        [
            "aggregate",
            "--channel-id", CHANNEL_ID,
            "--access-token", "ya29.test",
            "--group", "All",
            "--range", "Q:2025-01-01:2025-01-31",
            "--range", "Q:2025-02-01:2025-02-28",
        ],
    )
    assert result.exit_code == 2
    assert sum(provider.calls.values()) == 0
