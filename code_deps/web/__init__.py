"""Read-only JSON API over the dependency graph."""

from code_deps.web.app import create_app

__all__ = ["create_app"]
