"""TypeGraph CLI: type-hierarchy extraction and graph conversion."""

__version__ = "0.1.0"
