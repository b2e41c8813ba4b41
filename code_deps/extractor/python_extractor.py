"""Python import extractor using the ast module.

Relative imports are rewritten into path form so the resolver can treat
them like any other relative specifier::

    from .models import User       ->  ./models
    from ..core.db import engine   ->  ../core/db
    from . import views, forms     ->  ., ./views, ./forms
    from .. import *               ->  ..

Absolute imports are returned as dotted names and later dropped as external.
"""

from __future__ import annotations

import ast

from code_deps.errors import ExtractionError
from code_deps.extractor.base import BaseExtractor
from code_deps.models import Language


def _relative_prefix(level: int) -> str:
    return "./" if level == 1 else "../" * (level - 1)


class PythonExtractor(BaseExtractor):
    language = Language.PYTHON

    def extract(self, source: str, path: str = "") -> list[str]:
        try:
            tree = ast.parse(source, filename=path or "<unknown>")
        except (SyntaxError, ValueError) as e:
            raise ExtractionError(path or "<unknown>", str(e)) from e

        found: list[tuple[int, str]] = []
        for node in ast.walk(tree):
            offset = self._offset(node)
            if isinstance(node, ast.Import):
                for alias in node.names:
                    found.append((offset, alias.name))
            elif isinstance(node, ast.ImportFrom):
                if node.level == 0:
                    found.append((offset, node.module or ""))
                    continue
                prefix = _relative_prefix(node.level)
                if node.module:
                    found.append((offset, prefix + node.module.replace(".", "/")))
                else:
                    # names may live in the package's __init__.py or be submodules
                    found.append((offset, prefix.rstrip("/")))
                    for alias in node.names:
                        if alias.name != "*":
                            found.append((offset, prefix + alias.name))
        return self._ordered_unique(found)

    @staticmethod
    def _offset(node: ast.AST) -> int:
        # line/col packed into one sortable integer
        return getattr(node, "lineno", 0) * 100_000 + getattr(node, "col_offset", 0)
