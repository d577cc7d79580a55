"""Persistence schema for the Alchemy progression engine."""
