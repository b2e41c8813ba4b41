"""JSON artifacts in the cache directory: the graph, test map, test results, fix plan."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from code_deps.analysis.test_map import TestMap
from code_deps.errors import ArtifactMissingError
from code_deps.models import Cycle, DependencyGraph, FileNode, GraphStats, Language
from code_deps.paths import normalize_rel

logger = logging.getLogger(__name__)


# ── Graph (de)serialization ──────────────────────────────────


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: str) -> datetime:
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def graph_to_dict(graph: DependencyGraph) -> dict:
    return {
        "version": graph.version,
        "generated": _format_timestamp(graph.generated_at),
        "root": graph.root_path,
        "targetLanguage": graph.target_language.value,
        "files": {
            path: {
                "imports": sorted(node.imports),
                "importedBy": sorted(node.imported_by),
            }
            for path, node in sorted(graph.files.items())
        },
        "cycles": [list(c.files) for c in graph.cycles],
        "stats": {
            "totalFiles": graph.stats.total_files,
            "totalEdges": graph.stats.total_edges,
            "cycleCount": graph.stats.cycle_count,
        },
    }


def graph_from_dict(data: dict) -> DependencyGraph:
    """Rebuild a graph from its artifact form. Raises KeyError/ValueError on bad input."""
    language = Language(data.get("targetLanguage") or data["language"])

    files: dict[str, FileNode] = {}
    for path, entry in (data.get("files") or {}).items():
        key = normalize_rel(path)
        files[key] = FileNode(
            path=key,
            imports=frozenset(normalize_rel(p) for p in entry.get("imports") or []),
            imported_by=frozenset(normalize_rel(p) for p in entry.get("importedBy") or []),
        )

    cycles = tuple(Cycle(tuple(c)) for c in data.get("cycles") or [])
    raw_stats = data.get("stats") or {}
    stats = GraphStats(
        total_files=int(raw_stats.get("totalFiles", len(files))),
        total_edges=int(raw_stats.get("totalEdges", sum(len(n.imports) for n in files.values()))),
        cycle_count=int(raw_stats.get("cycleCount", len(cycles))),
    )

    return DependencyGraph(
        generated_at=_parse_timestamp(data["generated"]),
        root_path=str(data.get("root", ".")),
        target_language=language,
        files=files,
        cycles=cycles,
        stats=stats,
        version=int(data.get("version", 1)),
    )


# ── File I/O ─────────────────────────────────────────────────


def write_json_atomic(path: Path, data) -> Path:
    """Write JSON through a temp file in the same directory, then rename over ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", text=True)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise
    return path


def _read_json(path: Path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_graph(graph: DependencyGraph, path: Path) -> Path:
    write_json_atomic(path, graph_to_dict(graph))
    logger.info("Wrote dependency graph to %s", path)
    return Path(path)


def load_graph(path: Path) -> DependencyGraph:
    """Load the graph artifact. Missing or unreadable artifacts raise ArtifactMissingError."""
    path = Path(path)
    if not path.is_file():
        raise ArtifactMissingError(path)
    try:
        return graph_from_dict(_read_json(path))
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        raise ArtifactMissingError(path, f"Artifact is unreadable ({e}). Run \"code-deps build\" again.") from e


def load_test_map(path: Path) -> TestMap | None:
    """The optional test map, or None when absent or unreadable."""
    path = Path(path)
    if not path.is_file():
        return None
    try:
        data = _read_json(path)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable test map %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring malformed test map %s", path)
        return None
    return TestMap.from_dict(data)


def load_failing_tests(path: Path) -> list[str]:
    """Failing test files recorded in the test-result artifact (``errors[].testFile``)."""
    path = Path(path)
    if not path.is_file():
        raise ArtifactMissingError(path, "Run the test suite first or pass failing tests explicitly.")
    try:
        data = _read_json(path)
    except (OSError, json.JSONDecodeError) as e:
        raise ArtifactMissingError(path, f"Artifact is unreadable ({e}).") from e

    errors = data.get("errors") if isinstance(data, dict) else None
    tests: list[str] = []
    for entry in errors or []:
        test_file = entry.get("testFile") if isinstance(entry, dict) else None
        if test_file:
            tests.append(normalize_rel(test_file))
    return sorted(set(tests))


def save_report(data: dict, path: Path) -> Path:
    write_json_atomic(path, data)
    logger.info("Wrote report to %s", path)
    return Path(path)
