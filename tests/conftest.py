"""Shared fixtures: in-memory graphs and a copy of the on-disk JS project."""

import shutil
from datetime import datetime, timezone
from pathlib import Path

import pytest

from code_deps.models import DependencyGraph, FileNode, GraphStats, Language

FIXTURES = Path(__file__).parent / "fixtures"


def build_graph(edges, generated_at=None, language=Language.JAVASCRIPT):
    """Graph from ``{file: [imports]}``; targets without an entry get an empty node."""
    forward = {f: list(t) for f, t in edges.items()}
    for targets in list(forward.values()):
        for t in targets:
            forward.setdefault(t, [])
    reverse = {f: set() for f in forward}
    for f, targets in forward.items():
        for t in targets:
            reverse[t].add(f)
    files = {
        f: FileNode(path=f, imports=frozenset(t), imported_by=frozenset(reverse[f]))
        for f, t in forward.items()
    }
    return DependencyGraph(
        generated_at=generated_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
        root_path=".",
        target_language=language,
        files=files,
        stats=GraphStats(
            total_files=len(files),
            total_edges=sum(len(n.imports) for n in files.values()),
        ),
    )


@pytest.fixture
def make_graph():
    return build_graph


@pytest.fixture
def js_project(tmp_path):
    """Writable copy of fixtures/js_project."""
    dest = tmp_path / "js_project"
    shutil.copytree(FIXTURES / "js_project", dest)
    return dest
