"""Invariant predicate helpers."""
