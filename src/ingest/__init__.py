"""Event ingestion pipeline.

This module reads the ordered event feed from its origin and drives
each event through translation into a sink.
"""
