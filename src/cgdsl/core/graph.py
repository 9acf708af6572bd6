"""
Relationship graph export.

The language server builds a graph of the game's stages and transitions and
writes a Graphviz description on request. This module validates the
returned payload, persists it, fills in the description when the server did
not write one, and renders the image with Graphviz.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, Field, ValidationError

from .errors import CgdslError, GraphExportError
from .manifest import GraphConfig
from .writer import write_atomic

logger = logging.getLogger(__name__)


class GraphNode(BaseModel):
    id: str
    label: str | None = None

    model_config = {"frozen": True}


class GraphEdge(BaseModel):
    source: str
    target: str
    label: str = ""

    model_config = {"frozen": True}


class GraphPayload(BaseModel):
    """Nodes and edges returned by ``cgdsl/generateGraph``."""

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    @classmethod
    def from_result(cls, result: Any) -> GraphPayload | None:
        """
        Build a payload from a raw request result.

        Returns None for a null or empty result, which the server sends
        instead of partial data when graph construction fails.
        """
        data = _plain(result)
        if not data:
            return None
        if not isinstance(data, dict):
            raise GraphExportError("request", f"unexpected result type {type(result).__name__}")
        try:
            payload = cls.model_validate(data)
        except ValidationError as e:
            raise GraphExportError("request", f"malformed graph payload: {e}") from e
        return None if payload.is_empty else payload


def _plain(value: Any) -> Any:
    """Convert the client's result objects into plain JSON values."""
    if hasattr(value, "_asdict"):
        value = value._asdict()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_plain(v) for v in value]
    return value


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def render_dot(payload: GraphPayload) -> str:
    """Render a payload as a Graphviz digraph."""
    lines = [
        "digraph CFG {",
        "  graph [splines=ortho, nodesep=1.0, ranksep=1.0, concentrate=true];",
        "  node [shape=box, fontname=\"Consolas, 'Courier New', monospace\", "
        'style=filled, fillcolor="#ffffff", bordercolor="#333333"];',
        '  edge [fontname="Consolas", fontsize=9, arrowsize=0.8];',
    ]

    entry = payload.nodes[0].id if payload.nodes else (payload.edges[0].source if payload.edges else None)
    if entry is not None:
        lines.append("  entry [shape=point];")
        lines.append(f"  entry -> {_quote(entry)};")

    for node in payload.nodes:
        if node.label:
            lines.append(f"  {_quote(node.id)} [label={_quote(node.label)}];")

    for edge in payload.edges:
        lines.append(
            f"  {_quote(edge.source)} -> {_quote(edge.target)} [xlabel={_quote(f' {edge.label} ')}];"
        )

    lines.append("}")
    return "\n".join(lines) + "\n"


def render_image(dot_path: Path, config: GraphConfig) -> Path:
    """
    Run Graphviz on ``dot_path``.

    Returns:
        Path of the rendered image, next to the description file

    Raises:
        GraphExportError: If the renderer is missing, times out, or fails
    """
    image_path = dot_path.with_suffix(f".{config.format}")
    cmd = [config.renderer, f"-T{config.format}", str(dot_path), "-o", str(image_path)]
    logger.debug(f"Running {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=config.timeout)
    except FileNotFoundError as e:
        raise GraphExportError("render", f"'{config.renderer}' not found; install Graphviz") from e
    except subprocess.TimeoutExpired as e:
        raise GraphExportError("render", f"timed out after {config.timeout}s") from e

    if result.returncode != 0:
        detail = (result.stderr or "").strip() or f"exit code {result.returncode}"
        raise GraphExportError("render", detail)
    return image_path


class GraphSource(Protocol):
    """Anything that can ask the language server for a graph."""

    async def request_graph(self, path: Path) -> Any: ...


@dataclass
class GraphExportResult:
    ok: bool
    message: str
    payload_path: Path | None = None
    dot_path: Path | None = None
    image_path: Path | None = None


async def export_graph(source: GraphSource, target: Path, config: GraphConfig) -> GraphExportResult:
    """
    Export the relationship graph for ``target`` (a ``.dot`` path).

    Steps: request the graph, persist the payload as JSON, persist the
    Graphviz description, render the image. Failures are reported in the
    result, never raised.
    """
    target = target.resolve()
    result = GraphExportResult(ok=False, message="")
    try:
        try:
            # Only a description the server writes for this request is kept.
            target.unlink(missing_ok=True)
        except OSError as e:
            raise GraphExportError("persist", str(e)) from e

        try:
            raw = await source.request_graph(target)
        except CgdslError:
            raise
        except Exception as e:
            raise GraphExportError("request", str(e)) from e

        payload = GraphPayload.from_result(raw)
        if payload is None:
            raise GraphExportError("request", "language server returned no graph")

        try:
            result.payload_path = target.with_suffix(".json")
            write_atomic(result.payload_path, json.dumps(payload.model_dump(), indent=2) + "\n")

            if not target.exists():
                logger.info(f"Server did not write {target}; rendering from payload")
                write_atomic(target, render_dot(payload))
            result.dot_path = target
        except OSError as e:
            raise GraphExportError("persist", str(e)) from e

        result.image_path = render_image(target, config)
    except CgdslError as e:
        logger.warning(f"Graph export failed: {e.message}")
        result.message = e.message
        return result

    result.ok = True
    result.message = f"Graph written to {result.image_path}"
    return result
