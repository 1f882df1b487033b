"""Deduplication and collection encoding helpers."""
