"""Table storage and persistence layer.

This package holds in-memory tables, the continuous catalog binding
machinery, batch export, and the session facade over all of them.
"""
