"""Rendering and ROM services."""
