"""Graph construction and the read-only analyzers that consume it."""
