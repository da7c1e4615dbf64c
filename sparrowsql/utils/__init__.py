"""Utility helpers for sparrowsql."""
