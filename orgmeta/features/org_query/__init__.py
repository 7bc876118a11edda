"""Org query feature.

Compiles filter / column / sort descriptions into SQL over org_files and
shapes the grouped rows into a QueryResult.
"""
