"""Utility helpers shared across orthokit."""
