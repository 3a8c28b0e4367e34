"""Shared test fixtures for specmodel.

Provides reusable fixtures for loading fixture documents, creating isolated
config environments, managing output state, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from specmodel.core.node import Document
from specmodel.core.reader import DataModelReader
from specmodel.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict[str, Any]:
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during a
    test, the cached references go stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Raw OpenAPI 3.0 petstore document."""
    return load_fixture("petstore_3.0.json")


@pytest.fixture
def swagger_raw() -> dict[str, Any]:
    """Raw Swagger 2.0 petstore document."""
    return load_fixture("swagger_2.0.json")


@pytest.fixture
def streetlights_raw() -> dict[str, Any]:
    """Raw AsyncAPI 2.6 streetlights document."""
    return load_fixture("streetlights_2.6.json")


# ---------------------------------------------------------------------------
# Parsed document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore(petstore_raw: dict[str, Any]) -> Document:
    return DataModelReader().read_document(petstore_raw)


@pytest.fixture
def swagger(swagger_raw: dict[str, Any]) -> Document:
    return DataModelReader().read_document(swagger_raw)


@pytest.fixture
def streetlights(streetlights_raw: dict[str, Any]) -> Document:
    return DataModelReader().read_document(streetlights_raw)


@pytest.fixture(params=["petstore_3.0.json", "swagger_2.0.json", "streetlights_2.6.json"])
def any_raw(request: pytest.FixtureRequest) -> dict[str, Any]:
    """Each fixture document in turn."""
    return load_fixture(request.param)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME at tmp_path, clears the SPECMODEL_* environment
    variables, and changes the working directory to tmp_path so that no
    project-local ``specmodel.json`` leaks in.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for var in ["SPECMODEL_DISABLED_RULES", "SPECMODEL_OUTPUT_FORMAT"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
