import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ManifestError

MANIFEST_NAME = "cgdsl.toml"


@dataclass
class GrammarConfig:
    """Grammar build configuration."""

    name: str = "cgdsl"
    output: Path = Path("syntaxes/cgdsl.tmLanguage.json")
    taxonomy: Path | None = None  # YAML taxonomy; canonical vocabulary when unset


@dataclass
class ServerConfig:
    """Language server launch configuration."""

    command: Path = Path("bin/lsp_server")
    args: list[str] = field(default_factory=list)


@dataclass
class GraphConfig:
    """Graph rendering configuration."""

    renderer: str = "dot"  # Graphviz executable
    format: str = "png"
    timeout: int = 60  # seconds


@dataclass
class ProjectManifest:
    """Contents of cgdsl.toml. Paths are absolute after loading."""

    project_root: Path
    grammar: GrammarConfig = field(default_factory=GrammarConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    graph: GraphConfig = field(default_factory=GraphConfig)


def _expect(section: str, key: str, value: object, kind: type | tuple[type, ...]) -> None:
    if not isinstance(value, kind):
        raise ManifestError(f"[{section}] {key} has invalid value {value!r}")


def _resolve(root: Path, value: str | Path) -> Path:
    path = Path(value)
    return path if path.is_absolute() else root / path


def default_manifest(project_root: Path) -> ProjectManifest:
    root = project_root.resolve()
    grammar = GrammarConfig()
    grammar.output = _resolve(root, grammar.output)
    server = ServerConfig()
    server.command = _resolve(root, server.command)
    return ProjectManifest(project_root=root, grammar=grammar, server=server)


def load_manifest(path: Path) -> ProjectManifest:
    """
    Load cgdsl.toml.

    A missing file yields the defaults rooted at the file's directory.

    Raises:
        ManifestError: If the TOML is malformed or a value has the wrong type
    """
    root = path.parent.resolve()
    if not path.exists():
        return default_manifest(root)

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"Invalid TOML in {path}: {e}") from e

    manifest = default_manifest(root)

    grammar_data = data.get("grammar", {})
    if "name" in grammar_data:
        _expect("grammar", "name", grammar_data["name"], str)
        manifest.grammar.name = grammar_data["name"]
    if "output" in grammar_data:
        _expect("grammar", "output", grammar_data["output"], str)
        manifest.grammar.output = _resolve(root, grammar_data["output"])
    if "taxonomy" in grammar_data:
        _expect("grammar", "taxonomy", grammar_data["taxonomy"], str)
        manifest.grammar.taxonomy = _resolve(root, grammar_data["taxonomy"])

    server_data = data.get("server", {})
    if "command" in server_data:
        _expect("server", "command", server_data["command"], str)
        manifest.server.command = _resolve(root, server_data["command"])
    if "args" in server_data:
        args = server_data["args"]
        _expect("server", "args", args, list)
        for arg in args:
            _expect("server", "args", arg, str)
        manifest.server.args = list(args)

    graph_data = data.get("graph", {})
    if "renderer" in graph_data:
        _expect("graph", "renderer", graph_data["renderer"], str)
        manifest.graph.renderer = graph_data["renderer"]
    if "format" in graph_data:
        _expect("graph", "format", graph_data["format"], str)
        manifest.graph.format = graph_data["format"]
    if "timeout" in graph_data:
        timeout = graph_data["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            raise ManifestError(f"[graph] timeout has invalid value {timeout!r}")
        manifest.graph.timeout = timeout

    return manifest
