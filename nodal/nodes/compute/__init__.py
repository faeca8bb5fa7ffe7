"""Computation nodes."""
