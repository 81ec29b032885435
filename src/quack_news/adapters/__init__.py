"""Adapters for feeds, stores and rendering."""
