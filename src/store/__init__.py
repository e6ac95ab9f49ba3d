"""Roster persistence layer.

This package queues key/value storage with transparent chunking and
owns the in-memory roster and profile state served to the scan flow.
"""
