"""Shared test fixtures for apidex.

Provides reusable fixtures for loading spec fixtures, building query
engines, creating isolated config environments, managing output state,
and running CLI commands. These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from apidex.engine.query import QueryEngine
from apidex.models import Specification
from apidex.output import OutputFormat, OutputManager, reset_output, set_output
from apidex.parser.loader import build_specification, load_spec


FIXTURES_DIR = Path(__file__).parent / "fixtures"
PETSTORE_PATH = FIXTURES_DIR / "petstore_swagger.json"
WIDGETS_PATH = FIXTURES_DIR / "widgets_openapi.yaml"


def _inline_spec(paths: dict[str, Any], **extra: Any) -> Specification:
    document = {"swagger": "2.0", "info": {"title": "Inline", "version": "1"}}
    document.update(extra)
    document["paths"] = paths
    return build_specification(document)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Raw Swagger 2.0 petstore document."""
    with open(PETSTORE_PATH, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def petstore_spec() -> Specification:
    """Loaded Swagger 2.0 petstore specification."""
    return load_spec(str(PETSTORE_PATH))


@pytest.fixture
def petstore_engine(petstore_spec: Specification) -> QueryEngine:
    """Query engine over the petstore specification."""
    return QueryEngine(petstore_spec)


@pytest.fixture
def widgets_spec() -> Specification:
    """Loaded OpenAPI 3.0 widgets specification (YAML)."""
    return load_spec(str(WIDGETS_PATH))


@pytest.fixture
def widgets_engine(widgets_spec: Specification) -> QueryEngine:
    """Query engine over the widgets specification."""
    return QueryEngine(widgets_spec)


@pytest.fixture
def make_spec() -> Callable[..., Specification]:
    """Factory building a Swagger 2.0 Specification from an inline ``paths`` table.

    Extra keyword arguments become top-level document keys (``tags``,
    ``definitions``, ``security``, ...).
    """
    return _inline_spec


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config, clears ``APIDEX_SPEC``,
    and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("APIDEX_SPEC", raising=False)
    monkeypatch.setattr("apidex.config._is_xdg_platform", lambda: True)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
