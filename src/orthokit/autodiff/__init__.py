"""Differentiation rules and optional JAX integration for orthokit bases."""
