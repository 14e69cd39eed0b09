"""Detect RVM/rbenv installations and run Ruby under their environment."""

__version__ = "0.1.0"
