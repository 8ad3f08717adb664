"""Placement, intent expansion and sync engine."""
