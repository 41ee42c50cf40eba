"""End-to-end tests against a live Pinecone project.

Skipped by default unless an API key is provided.

Run with:
    pytest -m e2e --api-key=<project api key>

WARNING: These tests create and delete real indexes and collections, which
         may incur cost. Use a scratch project.
"""

from __future__ import annotations

import contextlib
import json
import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from pinecone_lifecycle.app import app

runner = CliRunner()

_PREFIX = "e2e-lifecycle"
_INDEX = f"{_PREFIX}-idx-{os.getpid()}"

pytestmark = pytest.mark.e2e


def _invoke(args: list[str], opts: list[str], state: Path):
    return runner.invoke(app, [*args, *opts, "--state", str(state)])


@pytest.fixture
def state(tmp_path: Path) -> Path:
    return tmp_path / "e2e.state.json"


class TestLiveIndexLifecycle:
    def test_create_show_delete(self, live_opts, state):
        try:
            result = _invoke([
                "index", "create", _INDEX, "-d", "8",
                "--cloud", "aws", "--region", "us-east-1",
            ], live_opts, state)
            assert result.exit_code == 0, result.output
            recorded = json.loads(state.read_text())
            assert recorded["index"][_INDEX]["status"]["ready"] is True

            result = _invoke(["index", "show", _INDEX, "-f", "json"], live_opts, state)
            assert result.exit_code == 0, result.output
            assert json.loads(result.output)["dimension"] == 8
        finally:
            with contextlib.suppress(Exception):
                result = _invoke(["index", "delete", _INDEX, "--force"], live_opts, state)
        assert result.exit_code == 0, result.output
        assert _INDEX not in json.loads(state.read_text())["index"]

    def test_delete_absent_index(self, live_opts, state):
        result = _invoke(["index", "delete", f"{_PREFIX}-never-created", "--force"], live_opts, state)
        assert result.exit_code == 0, result.output

    def test_list(self, live_opts):
        result = runner.invoke(app, ["index", "list", *live_opts, "-f", "json"])
        assert result.exit_code == 0, result.output
        assert isinstance(json.loads(result.output), list)
