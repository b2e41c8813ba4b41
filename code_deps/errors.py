"""Exception types raised by code-deps."""

from __future__ import annotations


class CodeDepsError(Exception):
    """Base class for all code-deps errors."""


class ConfigurationError(CodeDepsError):
    """Required source directories or patterns are missing or invalid."""


class ArtifactMissingError(CodeDepsError):
    """A required artifact (usually the dependency graph) is not available."""

    def __init__(self, path, hint: str = 'Run "code-deps build" first.'):
        self.path = path
        self.hint = hint
        super().__init__(f"No artifact found at {path}. {hint}")


class FileAccessError(CodeDepsError):
    """A source file could not be read. Recovered by skipping the file."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"read failed: {path}" + (f" ({reason})" if reason else ""))


class ExtractionError(CodeDepsError):
    """A source file could not be parsed. Recovered by skipping the file."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"parse failed: {path}" + (f" ({reason})" if reason else ""))


class UnresolvedReferenceError(CodeDepsError):
    """A specifier or requested file is not in the known-file set."""

    def __init__(self, reference: str, origin: str | None = None):
        self.reference = reference
        self.origin = origin
        where = f" (from {origin})" if origin else ""
        super().__init__(f"Unresolved reference: {reference}{where}")
