"""Hierarchical fold engine.

This package flattens nested-tag trees into rows and rebuilds trees
from rows for the markup codec.
"""
