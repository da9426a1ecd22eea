"""Adapters - concrete implementations of the object store ports."""
