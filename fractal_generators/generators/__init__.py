"""Built-in fractal families."""
