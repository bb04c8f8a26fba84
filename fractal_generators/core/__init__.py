"""Core types: parameters, outputs, plane mapping and the generator contract."""
