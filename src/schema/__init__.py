"""Schema resolution.

This package validates identifiers and resolves table and column names.
"""
