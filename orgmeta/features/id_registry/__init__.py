"""Document ID registry feature.

Reads the editor-owned mapping of document IDs to files.
"""
