"""Catalog search index maintenance.

Derives the index schema from catalog metadata, rebuilds generations behind
an alias without downtime, and dispatches search/autocomplete requests.
"""
