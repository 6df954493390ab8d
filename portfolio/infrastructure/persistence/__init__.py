"""Persistence: JSON document stores and the repositories built on them."""
