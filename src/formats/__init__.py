"""Format codec registry.

This package decodes external encodings into rows and encodes rows back,
with one codec value per format tag.
"""
