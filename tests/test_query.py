"""Tests for single-file queries and graph checks."""

import pytest

from code_deps.analysis.query import find_files, list_orphans, query_dependencies
from code_deps.errors import UnresolvedReferenceError


class TestQuery:
    def test_chains_both_directions(self, make_graph):
        graph = make_graph({
            "src/index.js": ["src/app.js"],
            "src/app.js": ["src/db.js"],
            "src/db.js": ["src/conn.js"],
        })
        q = query_dependencies(graph, "src/app.js", max_depth=3)
        assert q.imports == ["src/db.js"]
        assert [(c.file, c.depth, c.via) for c in q.imports_chain] == [
            ("src/db.js", 1, "src/app.js"),
            ("src/conn.js", 2, "src/db.js"),
        ]
        assert [c.file for c in q.imported_by_chain] == ["src/index.js"]

    def test_max_depth(self, make_graph):
        graph = make_graph({"a": ["b"], "b": ["c"], "c": ["d"]})
        q = query_dependencies(graph, "a", max_depth=2)
        assert [c.file for c in q.imports_chain] == ["b", "c"]

    def test_cycle_terminates(self, make_graph):
        graph = make_graph({"a": ["b"], "b": ["a"]})
        q = query_dependencies(graph, "a", max_depth=10)
        assert [c.file for c in q.imports_chain] == ["b"]
        assert q.to_dict()["imports"]["totalUnique"] == 1

    def test_unknown_file(self, make_graph):
        with pytest.raises(UnresolvedReferenceError):
            query_dependencies(make_graph({"a": []}), "zzz")


class TestFindFiles:
    def test_exact_then_partial(self, make_graph):
        graph = make_graph({"src/app.js": [], "src/app.jsx": [], "lib/app.js": []})
        assert find_files(graph, "./src/app.js") == ["src/app.js"]
        assert find_files(graph, "lib/app") == ["lib/app.js"]
        assert find_files(graph, "app.js") == ["lib/app.js", "src/app.js", "src/app.jsx"]

    def test_no_match(self, make_graph):
        with pytest.raises(UnresolvedReferenceError):
            find_files(make_graph({"a.js": []}), "nothing")


def test_list_orphans(make_graph):
    graph = make_graph({"a": ["b"], "c": [], "d": []})
    assert list_orphans(graph) == ["c", "d"]
