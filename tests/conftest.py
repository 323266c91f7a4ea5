"""Pytest configuration for the pricegap test suite."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from pathlib import Path

import duckdb
import pytest

from pricegap.core.config import reset_settings
from pricegap.core.data.repositories import DuckDBObservationStore
from pricegap.core.logging import configure_logging
from pricegap.core.services.rate_limit import reset_rate_budget


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that require external services.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="integration tests require --run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def _isolated_globals(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in ("PRICEGAP_PROVIDER__API_KEY", "PRICEGAP_STORAGE__DATABASE"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    reset_rate_budget()
    yield
    reset_settings()
    reset_rate_budget()
    configure_logging("WARNING")


@pytest.fixture
def duckdb_connection() -> Iterator[duckdb.DuckDBPyConnection]:
    connection = duckdb.connect(database=":memory:")
    yield connection
    connection.close()


@pytest.fixture
def store(duckdb_connection: duckdb.DuckDBPyConnection) -> DuckDBObservationStore:
    return DuckDBObservationStore(duckdb_connection)


@pytest.fixture
def today() -> date:
    return date(2024, 1, 31)


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()
