"""Off-chain metadata lookups.

This module resolves content pointers carried by metadata events
into the documents they reference.
"""
