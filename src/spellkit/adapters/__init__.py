"""Concrete adapters for the spellkit ports."""
