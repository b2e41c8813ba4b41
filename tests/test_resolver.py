"""Tests for relative specifier resolution."""

import pytest

from code_deps.analysis.resolver import Resolver
from code_deps.errors import UnresolvedReferenceError
from code_deps.models import Language
from code_deps.scanner import spec_for


def _resolver(files, language=Language.JAVASCRIPT):
    return Resolver(set(files), spec_for(language))


class TestResolver:
    def test_extension_probing_in_priority_order(self):
        r = _resolver(["src/a.jsx", "src/a.js", "src/main.js"])
        assert r.resolve("./a", "src/main.js") == "src/a.js"

    def test_index_file_fallback(self):
        r = _resolver(["src/utils/index.js", "src/main.js"])
        assert r.resolve("./utils", "src/main.js") == "src/utils/index.js"

    def test_explicit_extension_is_exact(self):
        r = _resolver(["src/styles.css.js", "src/main.js"])
        assert r.resolve_or_none("./styles.css", "src/main.js") is None

    def test_explicit_extension_matches(self):
        r = _resolver(["src/lib/format.js", "src/app.js"])
        assert r.resolve("./lib/format.js", "src/app.js") == "src/lib/format.js"

    def test_parent_directory(self):
        r = _resolver(["shared/log.ts", "app/deep/page.ts"], Language.TYPESCRIPT)
        assert r.resolve("../../shared/log", "app/deep/page.ts") == "shared/log.ts"

    def test_escaping_root_is_rejected(self):
        r = _resolver(["src/main.js"])
        assert r.candidates("../../outside", "src/main.js") == []
        with pytest.raises(UnresolvedReferenceError) as exc:
            r.resolve("../../outside", "src/main.js")
        assert exc.value.origin == "src/main.js"

    def test_bare_specifier_has_no_candidates(self):
        r = _resolver(["react.js"])
        assert r.candidates("react", "main.js") == []

    def test_python_package_init(self):
        r = _resolver(["pkg/__init__.py", "pkg/sub/__init__.py", "pkg/mod.py"], Language.PYTHON)
        assert r.resolve("./sub", "pkg/mod.py") == "pkg/sub/__init__.py"
        assert r.resolve("../pkg", "pkg/mod.py") == "pkg/__init__.py"

    def test_rust_mod_rs(self):
        r = _resolver(["src/main.rs", "src/parser/mod.rs", "src/lexer.rs"], Language.RUST)
        assert r.resolve("./parser", "src/main.rs") == "src/parser/mod.rs"
        assert r.resolve("./lexer", "src/main.rs") == "src/lexer.rs"

    def test_project_root_resolves_to_index(self):
        r = _resolver(["index.js", "src/a.js", "b.js"])
        assert r.resolve("..", "src/a.js") == "index.js"
        assert r.resolve("./", "b.js") == "index.js"
        assert r.resolve(".", "b.js") == "index.js"

    def test_project_root_without_index(self):
        r = _resolver(["src/a.js"])
        assert r.resolve_or_none("..", "src/a.js") is None
        assert r.candidates("../..", "src/a.js") == []
