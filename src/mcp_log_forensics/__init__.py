"""Heuristic forensic analysis of unstructured log files, served over MCP."""

__version__ = "0.1.0"
