"""Nodal: dataflow node-graph calculator engine and API."""

__version__ = "0.1.0"
