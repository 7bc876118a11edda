"""Org indexer feature.

Walks every registered document and replaces its rows in the metadata
store, isolating per-document failures.
"""
