"""Composition bundling, discovery and rendering."""
