"""Integration tests for index commands."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
import respx
from typer.testing import CliRunner

from pinecone_lifecycle.app import app

runner = CliRunner()
API = "https://api.test.pinecone.io"
CONN = ["--url", API, "--api-key", "pk-test"]


@pytest.fixture
def state_file(tmp_path: Path, isolated_config) -> Path:
    return tmp_path / "state.json"


def recorded(state_file: Path) -> dict:
    return json.loads(state_file.read_text())


class TestIndexCommands:
    @respx.mock
    def test_create_pod_index(self, state_file, index_json):
        create = respx.post(f"{API}/indexes").mock(return_value=httpx.Response(201, json={}))
        respx.get(f"{API}/indexes/widget").mock(
            return_value=httpx.Response(200, json=index_json()),
        )
        result = runner.invoke(app, [
            "index", "create", "widget", "-d", "512",
            "--environment", "us-west4-gcp", "--pod-type", "s1.x1",
            "--indexed", "genre", "--indexed", "year",
            *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 0, result.output
        assert "created and ready" in result.output
        body = json.loads(create.calls.last.request.content)
        assert body["spec"]["pod"]["metadata_config"] == {"indexed": ["genre", "year"]}
        assert recorded(state_file)["index"]["widget"]["status"]["state"] == "Ready"

    @respx.mock
    def test_create_serverless_index(self, state_file):
        create = respx.post(f"{API}/indexes").mock(return_value=httpx.Response(201, json={}))
        respx.get(f"{API}/indexes/sv").mock(return_value=httpx.Response(200, json={
            "name": "sv", "dimension": 8, "metric": "cosine",
            "spec": {"serverless": {"cloud": "aws", "region": "us-east-1"}},
            "status": {"ready": True, "state": "Ready"},
        }))
        result = runner.invoke(app, [
            "index", "create", "sv", "-d", "8", "--cloud", "aws", "--region", "us-east-1",
            *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 0, result.output
        body = json.loads(create.calls.last.request.content)
        assert body["spec"] == {"serverless": {"cloud": "aws", "region": "us-east-1"}}

    @respx.mock
    def test_create_with_two_placements(self, state_file):
        result = runner.invoke(app, [
            "index", "create", "widget", "-d", "8",
            "--environment", "us-west4-gcp", "--cloud", "aws", "--region", "us-east-1",
            *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 7
        assert respx.calls.call_count == 0
        assert not state_file.exists()

    @respx.mock
    def test_create_without_placement(self, state_file):
        result = runner.invoke(app, [
            "index", "create", "widget", "-d", "8", *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 7
        assert respx.calls.call_count == 0

    @respx.mock
    def test_create_times_out(self, state_file, index_json):
        respx.post(f"{API}/indexes").mock(return_value=httpx.Response(201, json={}))
        respx.get(f"{API}/indexes/widget").mock(
            return_value=httpx.Response(200, json=index_json(state="Initializing", ready=False)),
        )
        result = runner.invoke(app, [
            "index", "create", "widget", "-d", "512", "--environment", "us-west4-gcp",
            "--timeout", "0", *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 9
        assert recorded(state_file)["index"]["widget"]["status"]["state"] == "Initializing"

    @respx.mock
    def test_create_from_manifest(self, state_file, tmp_path, index_json):
        manifest = tmp_path / "widget.yaml"
        manifest.write_text(
            "name: widget\ndimension: 512\nspec:\n  pod:\n    environment: us-west4-gcp\n"
        )
        respx.post(f"{API}/indexes").mock(return_value=httpx.Response(201, json={}))
        respx.get(f"{API}/indexes/widget").mock(return_value=httpx.Response(200, json=index_json()))
        result = runner.invoke(app, [
            "index", "create", "--file", str(manifest), *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 0, result.output

    @respx.mock
    def test_show(self, state_file, index_json):
        respx.get(f"{API}/indexes/widget").mock(return_value=httpx.Response(200, json=index_json()))
        result = runner.invoke(app, [
            "index", "show", "widget", *CONN, "--state", str(state_file), "--format", "json",
        ])
        assert result.exit_code == 0
        assert json.loads(result.output)["host"].startswith("widget-")
        assert "widget" in recorded(state_file)["index"]

    @respx.mock
    def test_show_unwritable_state(self, tmp_path, isolated_config, index_json):
        respx.get(f"{API}/indexes/widget").mock(return_value=httpx.Response(200, json=index_json()))
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        result = runner.invoke(app, [
            "index", "show", "widget", *CONN, "--state", str(blocker / "sub" / "s.json"),
        ])
        assert result.exit_code == 10

    @respx.mock
    def test_show_missing(self, state_file):
        respx.get(f"{API}/indexes/ghost").mock(return_value=httpx.Response(404))
        result = runner.invoke(app, [
            "index", "show", "ghost", *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 4

    @respx.mock
    def test_configure(self, state_file, index_json):
        patch = respx.patch(f"{API}/indexes/widget").mock(
            return_value=httpx.Response(202, json={}),
        )
        respx.get(f"{API}/indexes/widget").mock(
            return_value=httpx.Response(200, json=index_json(state="ScalingUp", replicas=2)),
        )
        result = runner.invoke(app, [
            "index", "configure", "widget", "--replicas", "2", *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 0, result.output
        assert "ScalingUp" in result.output
        assert json.loads(patch.calls.last.request.content) == {"spec": {"pod": {"replicas": 2}}}

    def test_configure_nothing(self, state_file):
        result = runner.invoke(app, [
            "index", "configure", "widget", *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 7

    @respx.mock
    def test_delete(self, state_file, index_json):
        respx.get(f"{API}/indexes/widget").mock(side_effect=[
            httpx.Response(200, json=index_json()),
            httpx.Response(404),
        ])
        respx.delete(f"{API}/indexes/widget").mock(return_value=httpx.Response(202))
        runner.invoke(app, ["index", "show", "widget", *CONN, "--state", str(state_file)])
        assert "widget" in recorded(state_file)["index"]

        result = runner.invoke(app, [
            "index", "delete", "widget", "--force", *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 0, result.output
        assert "deleted" in result.output
        assert recorded(state_file)["index"] == {}

    def test_delete_cancelled(self, state_file):
        result = runner.invoke(app, [
            "index", "delete", "widget", *CONN, "--state", str(state_file),
        ], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output

    @respx.mock
    def test_list(self, state_file, index_json):
        respx.get(f"{API}/indexes").mock(return_value=httpx.Response(
            200, json={"indexes": [index_json("alpha"), index_json("beta")]},
        ))
        result = runner.invoke(app, ["index", "list", *CONN])
        assert result.exit_code == 0
        assert "alpha" in result.output
        assert "beta" in result.output

    @respx.mock
    def test_list_csv(self, state_file, index_json):
        respx.get(f"{API}/indexes").mock(return_value=httpx.Response(
            200, json={"indexes": [index_json("alpha")]},
        ))
        result = runner.invoke(app, ["index", "list", *CONN, "--format", "csv"])
        assert result.exit_code == 0
        assert result.output.splitlines()[0] == "Name,Dimension,Metric,Placement,State,Ready,Host"

    @respx.mock
    def test_import(self, state_file, index_json):
        respx.get(f"{API}/indexes/widget").mock(return_value=httpx.Response(200, json=index_json()))
        result = runner.invoke(app, [
            "index", "import", "widget", *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 0
        assert "imported" in result.output
        assert "widget" in recorded(state_file)["index"]

    @respx.mock
    def test_apply_scales_managed_index(self, state_file, tmp_path, index_json):
        respx.get(f"{API}/indexes/widget").mock(side_effect=[
            httpx.Response(200, json=index_json()),
            httpx.Response(200, json=index_json()),
            httpx.Response(200, json=index_json(state="ScalingUp", replicas=3)),
        ])
        patch = respx.patch(f"{API}/indexes/widget").mock(
            return_value=httpx.Response(202, json={}),
        )
        runner.invoke(app, ["index", "import", "widget", *CONN, "--state", str(state_file)])
        manifest = tmp_path / "widget.yaml"
        manifest.write_text(
            "name: widget\ndimension: 512\nspec:\n  pod:\n"
            "    environment: us-west4-gcp\n    pod_type: s1.x1\n    replicas: 3\n"
        )
        result = runner.invoke(app, [
            "index", "apply", str(manifest), *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 0, result.output
        assert "reconciled" in result.output
        assert patch.call_count == 1

    @respx.mock
    def test_apply_immutable_change(self, state_file, tmp_path, index_json):
        respx.get(f"{API}/indexes/widget").mock(return_value=httpx.Response(200, json=index_json()))
        runner.invoke(app, ["index", "import", "widget", *CONN, "--state", str(state_file)])
        manifest = tmp_path / "widget.json"
        manifest.write_text(json.dumps({
            "name": "widget", "dimension": 768,
            "spec": {"pod": {"environment": "us-west4-gcp", "pod_type": "s1.x1"}},
        }))
        result = runner.invoke(app, [
            "index", "apply", str(manifest), *CONN, "--state", str(state_file),
        ])
        assert result.exit_code == 7
