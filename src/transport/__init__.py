"""Remote transport.

This package fetches and stores remote locations for import, export,
and continuous catalog bindings.
"""
