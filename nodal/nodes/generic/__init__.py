"""Annotation nodes with no dataflow role."""
