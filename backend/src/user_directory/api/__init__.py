"""Resolver entrypoints."""
