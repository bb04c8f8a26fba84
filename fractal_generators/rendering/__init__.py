"""Coloring and image conversion of generator output."""
