from __future__ import annotations

import asyncio
import json
from datetime import date

import pytest
from typer.testing import CliRunner

from pricegap.cli import coverage as coverage_module
from pricegap.cli.main import create_app
from pricegap.core.data.repositories import DuckDBObservationStore
from pricegap.core.services import CoverageAnalyzer

BASE_ARGS = ["--format", "jsonl", "--log-level", "ERROR"]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def analyzer(store: DuckDBObservationStore, monkeypatch: pytest.MonkeyPatch) -> CoverageAnalyzer:
    async def seed() -> None:
        await store.write("AAPL", date(2024, 1, 2), "185.64", "alpha_vantage")
        await store.write("AAPL", date(2024, 1, 3), "184.25", "alpha_vantage")
        await store.write("AAPL", date(2024, 1, 4), "181.91", "manual")

    asyncio.run(seed())
    analyzer = CoverageAnalyzer(store, clock=lambda: date(2024, 1, 5), fallback_days=3)
    monkeypatch.setattr(coverage_module, "get_analyzer", lambda settings: analyzer)
    return analyzer


def _rows(output: str, key: str) -> list[dict[str, object]]:
    rows = []
    for line in output.splitlines():
        if not line.startswith("{"):
            continue
        payload = json.loads(line)
        if key in payload:
            rows.append(payload)
    return rows


def test_list_sorts_worst_coverage_first(runner: CliRunner, analyzer: CoverageAnalyzer) -> None:
    result = runner.invoke(create_app(), [*BASE_ARGS, "coverage", "list", "aapl", "MSFT", "CASH"])

    assert result.exit_code == 0, result.output
    rows = _rows(result.output, "coverage_percent")
    assert [row["symbol"] for row in rows] == ["MSFT", "AAPL"]
    assert rows[1]["coverage_percent"] == 75.0
    assert rows[1]["days_of_data"] == 3
    assert rows[1]["expected_days"] == 4
    assert rows[1]["latest_date"] == "2024-01-04"


def test_list_by_symbol(runner: CliRunner, analyzer: CoverageAnalyzer) -> None:
    result = runner.invoke(create_app(), [*BASE_ARGS, "coverage", "list", "MSFT", "AAPL", "--sort", "symbol"])

    assert result.exit_code == 0, result.output
    assert [row["symbol"] for row in _rows(result.output, "coverage_percent")] == ["AAPL", "MSFT"]


def test_list_rejects_unknown_sort(runner: CliRunner, analyzer: CoverageAnalyzer) -> None:
    result = runner.invoke(create_app(), [*BASE_ARGS, "coverage", "list", "AAPL", "--sort", "name"])

    assert result.exit_code == 2
    assert "Unsupported sort order" in result.output


def test_map_classifies_each_date(runner: CliRunner, analyzer: CoverageAnalyzer) -> None:
    result = runner.invoke(
        create_app(),
        [*BASE_ARGS, "coverage", "map", "AAPL", "--start", "2024-01-04", "--end", "2024-01-07"],
    )

    assert result.exit_code == 0, result.output
    rows = _rows(result.output, "kind")
    assert [(row["date"], row["kind"]) for row in rows] == [
        ("2024-01-04", "real"),
        ("2024-01-05", "missing"),
        ("2024-01-06", "expected_gap"),
        ("2024-01-07", "expected_gap"),
    ]
    assert rows[0]["source"] == "manual"
    assert rows[2]["quality"] == 0.7


def test_map_source_filter_and_missing_only(runner: CliRunner, analyzer: CoverageAnalyzer) -> None:
    app = create_app()

    by_source = runner.invoke(app, [*BASE_ARGS, "coverage", "map", "AAPL", "--source", "alpha_vantage"])
    missing = runner.invoke(app, [*BASE_ARGS, "coverage", "map", "AAPL", "--missing-only"])

    assert by_source.exit_code == 0, by_source.output
    assert [row["date"] for row in _rows(by_source.output, "kind")] == ["2024-01-02", "2024-01-03"]
    assert missing.exit_code == 0, missing.output
    assert [row["date"] for row in _rows(missing.output, "kind")] == ["2024-01-05"]


def test_map_rejects_inverted_range(runner: CliRunner, analyzer: CoverageAnalyzer) -> None:
    result = runner.invoke(
        create_app(),
        [*BASE_ARGS, "coverage", "map", "AAPL", "--start", "2024-01-05", "--end", "2024-01-02"],
    )

    assert result.exit_code == 2
    assert "INVALID_DATE_RANGE" in result.output


def test_gaps_reports_missing_runs(runner: CliRunner, analyzer: CoverageAnalyzer) -> None:
    result = runner.invoke(create_app(), [*BASE_ARGS, "coverage", "gaps", "MSFT"])

    assert result.exit_code == 0, result.output
    assert _rows(result.output, "missing_days") == [
        {"symbol": "MSFT", "start": "2024-01-02", "end": "2024-01-05", "missing_days": 4}
    ]


def test_sources_counts_prices(runner: CliRunner, analyzer: CoverageAnalyzer) -> None:
    result = runner.invoke(create_app(), [*BASE_ARGS, "coverage", "sources", "AAPL"])

    assert result.exit_code == 0, result.output
    assert _rows(result.output, "count") == [
        {"source": "alpha_vantage", "count": 2},
        {"source": "manual", "count": 1},
    ]


def test_table_output(runner: CliRunner, analyzer: CoverageAnalyzer) -> None:
    result = runner.invoke(create_app(), ["--no-color", "--log-level", "ERROR", "coverage", "sources", "AAPL"])

    assert result.exit_code == 0, result.output
    assert "alpha_vantage" in result.output
    assert "manual" in result.output
    assert "count" in result.output
