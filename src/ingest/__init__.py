"""Roster ingestion.

This package reads uploaded CSV rosters and validates their columns.
It produces the canonical records held by the dataset store.
"""
