"""Utility helpers for pyanomap."""
