"""Storage layer.

This module owns the relational schema and the sinks that print or
apply generated mutations.
"""
