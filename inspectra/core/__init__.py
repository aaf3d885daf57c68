"""Domain core: approval chains, entities and settings."""
