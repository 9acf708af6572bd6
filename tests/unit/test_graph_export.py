"""Tests for relationship graph export: payload handling, DOT rendering, Graphviz."""

import json
import subprocess
from collections import namedtuple
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from cgdsl.core.errors import GraphExportError
from cgdsl.core.graph import GraphPayload, export_graph, render_dot, render_image
from cgdsl.core.manifest import GraphConfig

PAYLOAD = {
    "nodes": [{"id": "setup", "label": "Setup"}, {"id": "play"}],
    "edges": [{"source": "setup", "target": "play", "label": "deal"}],
}


class FakeServer:
    """Stands in for the language server session."""

    def __init__(self, result: Any = None, write_dot: str | None = None, error: Exception | None = None):
        self.result = result
        self.write_dot = write_dot
        self.error = error
        self.requested: list[Path] = []

    async def request_graph(self, path: Path) -> Any:
        self.requested.append(path)
        if self.error is not None:
            raise self.error
        if self.write_dot is not None:
            path.write_text(self.write_dot)
        return self.result


def _ok_run() -> MagicMock:
    run = MagicMock()
    run.returncode = 0
    run.stderr = ""
    return run


class TestGraphPayload:
    def test_from_dict(self) -> None:
        payload = GraphPayload.from_result(PAYLOAD)
        assert payload is not None
        assert [n.id for n in payload.nodes] == ["setup", "play"]
        assert payload.edges[0].label == "deal"

    @pytest.mark.parametrize("result", [None, {}, {"nodes": [], "edges": []}])
    def test_absent_results(self, result: Any) -> None:
        assert GraphPayload.from_result(result) is None

    def test_from_named_tuples(self) -> None:
        Node = namedtuple("Node", ["id", "label"])
        Result = namedtuple("Result", ["nodes", "edges"])
        payload = GraphPayload.from_result(Result(nodes=[Node("a", "A")], edges=[]))
        assert payload is not None
        assert payload.nodes[0].label == "A"

    def test_malformed(self) -> None:
        with pytest.raises(GraphExportError, match="malformed graph payload"):
            GraphPayload.from_result({"nodes": "setup"})

    def test_unexpected_type(self) -> None:
        with pytest.raises(GraphExportError, match="unexpected result type"):
            GraphPayload.from_result([1, 2])


class TestRenderDot:
    def test_layout_and_entry(self) -> None:
        dot = render_dot(GraphPayload.model_validate(PAYLOAD))
        lines = dot.splitlines()
        assert lines[0] == "digraph CFG {"
        assert lines[1] == "  graph [splines=ortho, nodesep=1.0, ranksep=1.0, concentrate=true];"
        assert "  entry [shape=point];" in lines
        assert '  entry -> "setup";' in lines
        assert '  "setup" [label="Setup"];' in lines
        assert '  "setup" -> "play" [xlabel=" deal "];' in lines
        assert dot.endswith("}\n")

    def test_escapes_quotes(self) -> None:
        payload = GraphPayload.model_validate(
            {"edges": [{"source": "a", "target": "b", "label": 'say "hi"'}]}
        )
        assert '  "a" -> "b" [xlabel=" say \\"hi\\" "];' in render_dot(payload)

    def test_escapes_backslashes_in_labels(self) -> None:
        payload = GraphPayload.model_validate(
            {"edges": [{"source": "a", "target": "b", "label": 'x\\"y'}]}
        )
        assert '  "a" -> "b" [xlabel=" x\\\\\\"y "];' in render_dot(payload)

    def test_entry_from_first_edge_without_nodes(self) -> None:
        payload = GraphPayload.model_validate({"edges": [{"source": "x", "target": "y"}]})
        assert '  entry -> "x";' in render_dot(payload)


class TestRenderImage:
    def test_runs_graphviz(self, tmp_path: Path) -> None:
        dot_path = tmp_path / "game.dot"
        with patch("subprocess.run", return_value=_ok_run()) as mock_run:
            image = render_image(dot_path, GraphConfig())
        assert image == tmp_path / "game.png"
        cmd = mock_run.call_args[0][0]
        assert cmd == ["dot", "-Tpng", str(dot_path), "-o", str(tmp_path / "game.png")]
        assert mock_run.call_args.kwargs["timeout"] == 60

    def test_custom_format(self, tmp_path: Path) -> None:
        config = GraphConfig(renderer="neato", format="svg", timeout=5)
        with patch("subprocess.run", return_value=_ok_run()) as mock_run:
            image = render_image(tmp_path / "g.dot", config)
        assert image.suffix == ".svg"
        assert mock_run.call_args[0][0][:2] == ["neato", "-Tsvg"]

    def test_failure_reports_stderr(self, tmp_path: Path) -> None:
        run = MagicMock()
        run.returncode = 1
        run.stderr = "Error: syntax error in line 3\n"
        with patch("subprocess.run", return_value=run):
            with pytest.raises(GraphExportError, match="syntax error in line 3"):
                render_image(tmp_path / "g.dot", GraphConfig())

    def test_missing_renderer(self, tmp_path: Path) -> None:
        with patch("subprocess.run", side_effect=FileNotFoundError("dot")):
            with pytest.raises(GraphExportError, match="install Graphviz"):
                render_image(tmp_path / "g.dot", GraphConfig())

    def test_timeout(self, tmp_path: Path) -> None:
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("dot", 60)):
            with pytest.raises(GraphExportError, match="timed out"):
                render_image(tmp_path / "g.dot", GraphConfig())


class TestExportGraph:
    @pytest.mark.asyncio
    async def test_success_renders_dot_from_payload(self, tmp_path: Path) -> None:
        target = tmp_path / "game.dot"
        server = FakeServer(result=PAYLOAD)
        with patch("subprocess.run", return_value=_ok_run()):
            result = await export_graph(server, target, GraphConfig())

        assert result.ok, result.message
        assert server.requested == [target.resolve()]
        assert result.payload_path == target.resolve().with_suffix(".json")
        assert json.loads(result.payload_path.read_text()) == {
            "nodes": [{"id": "setup", "label": "Setup"}, {"id": "play", "label": None}],
            "edges": [{"source": "setup", "target": "play", "label": "deal"}],
        }
        assert target.read_text().startswith("digraph CFG {")
        assert result.image_path == target.resolve().with_suffix(".png")
        assert "game.png" in result.message

    @pytest.mark.asyncio
    async def test_keeps_server_written_description(self, tmp_path: Path) -> None:
        target = tmp_path / "game.dot"
        server = FakeServer(result=PAYLOAD, write_dot="digraph server {}\n")
        with patch("subprocess.run", return_value=_ok_run()):
            result = await export_graph(server, target, GraphConfig())
        assert result.ok
        assert target.read_text() == "digraph server {}\n"

    @pytest.mark.asyncio
    async def test_request_failure_is_reported(self, tmp_path: Path) -> None:
        server = FakeServer(error=RuntimeError("connection lost"))
        with patch("subprocess.run") as mock_run:
            result = await export_graph(server, tmp_path / "game.dot", GraphConfig())
        assert not result.ok
        assert "connection lost" in result.message
        mock_run.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_payload_is_reported(self, tmp_path: Path) -> None:
        server = FakeServer(result=None)
        result = await export_graph(server, tmp_path / "game.dot", GraphConfig())
        assert not result.ok
        assert "returned no graph" in result.message
        assert not (tmp_path / "game.json").exists()

    @pytest.mark.asyncio
    async def test_render_failure_is_reported(self, tmp_path: Path) -> None:
        run = MagicMock()
        run.returncode = 2
        run.stderr = "Format: \"png\" not recognized"
        with patch("subprocess.run", return_value=run):
            result = await export_graph(FakeServer(result=PAYLOAD), tmp_path / "g.dot", GraphConfig())
        assert not result.ok
        assert result.message.startswith("render:")
        assert "not recognized" in result.message
        assert (tmp_path / "g.json").exists()
        assert result.image_path is None

    @pytest.mark.asyncio
    async def test_repeated_export_overwrites(self, tmp_path: Path) -> None:
        target = tmp_path / "game.dot"
        with patch("subprocess.run", return_value=_ok_run()):
            first = await export_graph(FakeServer(result=PAYLOAD), target, GraphConfig())
            content = target.read_text()
            second = await export_graph(FakeServer(result=PAYLOAD), target, GraphConfig())
        assert first.ok and second.ok
        assert target.read_text() == content

    @pytest.mark.asyncio
    async def test_repeated_export_renders_new_payload(self, tmp_path: Path) -> None:
        target = tmp_path / "game.dot"
        old = {"nodes": [{"id": "old"}], "edges": []}
        new = {"nodes": [{"id": "new"}], "edges": []}
        with patch("subprocess.run", return_value=_ok_run()):
            await export_graph(FakeServer(result=old), target, GraphConfig())
            result = await export_graph(FakeServer(result=new), target, GraphConfig())
        assert result.ok
        dot = target.read_text()
        assert 'entry -> "new";' in dot
        assert '"old"' not in dot
        assert json.loads(target.with_suffix(".json").read_text())["nodes"][0]["id"] == "new"

    @pytest.mark.asyncio
    async def test_server_description_replaces_rendered_one(self, tmp_path: Path) -> None:
        target = tmp_path / "game.dot"
        with patch("subprocess.run", return_value=_ok_run()):
            await export_graph(FakeServer(result=PAYLOAD), target, GraphConfig())
            server = FakeServer(result=PAYLOAD, write_dot="digraph server {}\n")
            result = await export_graph(server, target, GraphConfig())
        assert result.ok
        assert target.read_text() == "digraph server {}\n"
