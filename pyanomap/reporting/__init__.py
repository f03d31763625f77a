"""Run reporting helpers."""
