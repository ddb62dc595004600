"""Event-to-mutation translation.

This module maps each event variant onto exactly one database
mutation against the project and round tables.
"""
