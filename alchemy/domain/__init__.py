"""Domain-level presentation metadata for Alchemy (exception templates)."""
