"""code-deps: file-level dependency graphs and the analyses built on them."""

__version__ = "0.1.0"
