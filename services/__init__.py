"""Core operations of the registry, called by the blueprints and CLI scripts."""
