"""Import directive layer.

This package reads import sources and decodes them into resolved rows.
The session turns the result into an in-memory table.
"""
