"""Frontmatter extraction feature.

Reads the leading #+KEY: value block of a document and splits rich links
out of header values.
"""
