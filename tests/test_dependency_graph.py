"""Tests for the graph builder."""

from pathlib import Path

import pytest

from code_deps.analysis.dependency_graph import DependencyGraphBuilder
from code_deps.models import Language

FIXTURES = Path(__file__).parent / "fixtures"


def _write(root: Path, files: dict[str, str]) -> dict[str, Path]:
    out = {}
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        out[rel] = path
    return out


def _assert_edge_symmetry(graph):
    for path, node in graph.files.items():
        for target in node.imports:
            assert target in graph.files
            assert path in graph.files[target].imported_by
        for importer in node.imported_by:
            assert path in graph.files[importer].imports
    assert graph.stats.total_files == len(graph.files)
    assert graph.stats.total_edges == sum(len(n.imports) for n in graph.files.values())
    assert graph.stats.cycle_count == len(graph.cycles)


class TestFixtureProject:
    @pytest.fixture
    def graph(self):
        builder = DependencyGraphBuilder(Language.JAVASCRIPT)
        result = builder.build_project(FIXTURES / "js_project", ["src"], ignore=["**/*.test.js"])
        assert result.warnings == []
        return result.graph

    def test_edges(self, graph):
        assert graph.imports_of("src/index.js") == {"src/app.js", "src/utils/index.js"}
        assert graph.imports_of("src/app.js") == {"src/utils/format.js", "src/a.js"}
        assert graph.imports_of("src/utils/index.js") == {"src/utils/format.js"}
        assert graph.importers_of("src/utils/format.js") == {"src/app.js", "src/utils/index.js"}

    def test_external_and_commented_imports_dropped(self, graph):
        assert graph.imports_of("src/utils/format.js") == frozenset()
        assert all(not t.startswith("lodash") for n in graph.files.values() for t in n.imports)

    def test_cycle_and_stats(self, graph):
        assert [c.files for c in graph.cycles] == [("src/a.js", "src/b.js")]
        assert graph.stats.total_files == 7
        assert graph.stats.total_edges == 7
        assert graph.stats.cycle_count == 1

    def test_edge_symmetry(self, graph):
        _assert_edge_symmetry(graph)
        assert graph.target_language == Language.JAVASCRIPT
        assert graph.generated_at.tzinfo is not None


class TestBuilderScenarios:
    def test_chain(self, tmp_path):
        files = _write(tmp_path, {
            "A.js": "import b from './B';\n",
            "B.js": "import c from './C';\n",
            "C.js": "export default 1;\n",
        })
        graph = DependencyGraphBuilder(Language.JAVASCRIPT).build(files).graph
        assert graph.imports_of("A.js") == {"B.js"}
        assert graph.importers_of("C.js") == {"B.js"}
        assert graph.cycles == ()

    def test_two_cycle(self, tmp_path):
        files = _write(tmp_path, {
            "X.js": "require('./Y');\n",
            "Y.js": "require('./X');\n",
        })
        graph = DependencyGraphBuilder(Language.JAVASCRIPT).build(files).graph
        assert [list(c.files) for c in graph.cycles] == [["X.js", "Y.js"]]
        assert graph.stats.cycle_count == 1

    def test_unresolved_specifier_omitted(self, tmp_path):
        files = _write(tmp_path, {"a.js": "import x from './missing';\nimport y from './b';\n", "b.js": ""})
        graph = DependencyGraphBuilder(Language.JAVASCRIPT).build(files).graph
        assert graph.imports_of("a.js") == {"b.js"}

    def test_unparsable_file_excluded(self, tmp_path):
        files = _write(tmp_path, {
            "pkg/__init__.py": "",
            "pkg/good.py": "from .bad import thing\nfrom . import helper\n",
            "pkg/bad.py": "def broken(:\n",
            "pkg/helper.py": "VALUE = 1\n",
        })
        result = DependencyGraphBuilder(Language.PYTHON).build(files)
        graph = result.graph
        assert "pkg/bad.py" not in graph
        assert graph.imports_of("pkg/good.py") == {"pkg/helper.py", "pkg/__init__.py"}
        assert len(result.warnings) == 1
        assert "pkg/bad.py" in result.warnings[0]
        _assert_edge_symmetry(graph)

    def test_unreadable_file_excluded(self, tmp_path):
        files = _write(tmp_path, {"a.js": "import b from './b';\n", "b.js": ""})
        files["b.js"] = tmp_path / "does-not-exist.js"
        result = DependencyGraphBuilder(Language.JAVASCRIPT).build(files)
        assert list(result.graph.files) == ["a.js"]
        assert result.graph.imports_of("a.js") == frozenset()
        assert "read failed" in result.warnings[0]

    def test_duplicate_imports_one_edge(self, tmp_path):
        files = _write(tmp_path, {
            "a.js": "import b from './b';\nconst again = require('./b.js');\n",
            "b.js": "",
        })
        graph = DependencyGraphBuilder(Language.JAVASCRIPT).build(files).graph
        assert graph.stats.total_edges == 1

    def test_go_and_rust(self, tmp_path):
        go = _write(tmp_path / "go", {"main.go": 'import "./util"\n', "util/index.go": "package util\n"})
        graph = DependencyGraphBuilder(Language.GO).build(go).graph
        assert graph.imports_of("main.go") == {"util/index.go"}

        rs = _write(tmp_path / "rs", {"main.rs": "mod parser;\nuse std::io;\n", "parser/mod.rs": ""})
        graph = DependencyGraphBuilder(Language.RUST).build(rs).graph
        assert graph.imports_of("main.rs") == {"parser/mod.rs"}

    def test_empty(self):
        graph = DependencyGraphBuilder(Language.JAVASCRIPT).build({}).graph
        assert graph.files == {}
        assert graph.stats.total_files == 0

    def test_import_of_project_root(self, tmp_path):
        files = _write(tmp_path, {
            "index.js": "export default 1;\n",
            "src/a.js": "import root from '..';\n",
            "b.js": "import root from './';\n",
        })
        graph = DependencyGraphBuilder(Language.JAVASCRIPT).build(files).graph
        assert graph.importers_of("index.js") == {"src/a.js", "b.js"}

    def test_python_package_import_reaches_init(self, tmp_path):
        files = _write(tmp_path, {
            "pkg/__init__.py": "from . import mod\n",
            "pkg/mod.py": "from . import *\n",
            "pkg/sub/__init__.py": "",
            "pkg/sub/leaf.py": "from .. import mod\n",
        })
        graph = DependencyGraphBuilder(Language.PYTHON).build(files).graph
        assert graph.imports_of("pkg/mod.py") == {"pkg/__init__.py"}
        assert graph.imports_of("pkg/sub/leaf.py") == {"pkg/__init__.py", "pkg/mod.py"}
        # a package importing its own submodules has no edge to itself
        assert graph.imports_of("pkg/__init__.py") == {"pkg/mod.py"}
        _assert_edge_symmetry(graph)

    def test_files_mapping_is_read_only(self, tmp_path):
        files = _write(tmp_path, {"a.js": "import b from './b';\n", "b.js": ""})
        graph = DependencyGraphBuilder(Language.JAVASCRIPT).build(files).graph
        with pytest.raises(TypeError):
            graph.files["c.js"] = graph.files["a.js"]
        with pytest.raises(TypeError):
            del graph.files["a.js"]
        assert sorted(graph.files) == ["a.js", "b.js"]
