"""Compiled kernels and the shared worker pool."""
