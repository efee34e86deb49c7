"""
File persistence for the catalog index and per-show meta records.
"""
