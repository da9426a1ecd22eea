"""Domain layer - entities and pure storage logic."""
