"""Tombo dashboard backend."""
