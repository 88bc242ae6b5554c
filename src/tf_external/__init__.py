"""Run external programs as infrastructure data sources and resources."""

__version__ = "0.1.0"
