"""
Numba JIT compilation backend for fractal computation.

This module provides JIT-compiled inner loops for escape-time iteration and
for orbit integration of dynamical systems. Kernels are compiled with
``nogil=True`` so that generations submitted to the shared worker pool run
concurrently; a single generation never splits its pixels across threads.
"""

import math
import logging

import numba
import numpy as np
from numba import jit

from ..core.math_functions import IterationResult

logger = logging.getLogger(__name__)
logger.debug(f"Numba available: {numba.__version__}")

ESCAPE_RADIUS_SQ = 4.0
DERIVATIVE_EPSILON = 1e-12

# Cube roots of unity, the roots of z^3 - 1
NEWTON_ROOTS_REAL = np.array([1.0, -0.5, -0.5])
NEWTON_ROOTS_IMAG = np.array([0.0, math.sqrt(3.0) / 2.0, -math.sqrt(3.0) / 2.0])


@jit(nopython=True, nogil=True, cache=True)
def mandelbrot_kernel(c_real, c_imag, max_iter):
    """
    JIT-compiled Mandelbrot kernel: z = z^2 + c from z = 0.

    Args:
        c_real: Real coordinate of every column
        c_imag: Imaginary coordinate of every row
        max_iter: Maximum iterations

    Returns:
        (rows, columns) int32 iteration counts; max_iter for points in the set
    """
    height = c_imag.shape[0]
    width = c_real.shape[0]
    iterations = np.empty((height, width), dtype=np.int32)

    for i in range(height):
        ci = c_imag[i]
        for j in range(width):
            cr = c_real[j]
            zr = 0.0
            zi = 0.0
            n = 0
            while n < max_iter:
                zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
                if zr * zr + zi * zi > ESCAPE_RADIUS_SQ:
                    break
                n += 1
            iterations[i, j] = n

    return iterations


@jit(nopython=True, nogil=True, cache=True)
def julia_kernel(z_real, z_imag, c_real, c_imag, max_iter):
    """
    JIT-compiled Julia set kernel: z = z^2 + c seeded with the pixel point.

    Args:
        z_real: Real coordinate of every column
        z_imag: Imaginary coordinate of every row
        c_real: Real component of Julia constant
        c_imag: Imaginary component of Julia constant
        max_iter: Maximum iterations

    Returns:
        (rows, columns) int32 iteration counts
    """
    height = z_imag.shape[0]
    width = z_real.shape[0]
    iterations = np.empty((height, width), dtype=np.int32)

    for i in range(height):
        for j in range(width):
            zr = z_real[j]
            zi = z_imag[i]
            n = 0
            while n < max_iter:
                zr, zi = zr * zr - zi * zi + c_real, 2.0 * zr * zi + c_imag
                if zr * zr + zi * zi > ESCAPE_RADIUS_SQ:
                    break
                n += 1
            iterations[i, j] = n

    return iterations


@jit(nopython=True, nogil=True, cache=True)
def tricorn_kernel(c_real, c_imag, max_iter):
    """
    JIT-compiled Tricorn (Mandelbar) kernel: z = conj(z)^2 + c.

    Args:
        c_real: Real coordinate of every column
        c_imag: Imaginary coordinate of every row
        max_iter: Maximum iterations

    Returns:
        (rows, columns) int32 iteration counts
    """
    height = c_imag.shape[0]
    width = c_real.shape[0]
    iterations = np.empty((height, width), dtype=np.int32)

    for i in range(height):
        ci = c_imag[i]
        for j in range(width):
            cr = c_real[j]
            zr = 0.0
            zi = 0.0
            n = 0
            while n < max_iter:
                zr, zi = zr * zr - zi * zi + cr, -2.0 * zr * zi + ci
                if zr * zr + zi * zi > ESCAPE_RADIUS_SQ:
                    break
                n += 1
            iterations[i, j] = n

    return iterations


@jit(nopython=True, nogil=True, cache=True)
def burning_ship_kernel(c_real, c_imag, max_iter):
    """
    JIT-compiled Burning Ship fractal kernel.

    Args:
        c_real: Real coordinate of every column
        c_imag: Imaginary coordinate of every row
        max_iter: Maximum iterations

    Returns:
        (rows, columns) int32 iteration counts
    """
    height = c_imag.shape[0]
    width = c_real.shape[0]
    iterations = np.empty((height, width), dtype=np.int32)

    for i in range(height):
        ci = c_imag[i]
        for j in range(width):
            cr = c_real[j]
            zr = 0.0
            zi = 0.0
            n = 0
            while n < max_iter:
                # Burning Ship: z = (|Re(z)| + i|Im(z)|)^2 + c
                zr_abs = abs(zr)
                zi_abs = abs(zi)
                zr, zi = zr_abs * zr_abs - zi_abs * zi_abs + cr, 2.0 * zr_abs * zi_abs + ci
                if zr * zr + zi * zi > ESCAPE_RADIUS_SQ:
                    break
                n += 1
            iterations[i, j] = n

    return iterations


@jit(nopython=True, nogil=True, cache=True)
def multibrot_kernel(c_real, c_imag, power, max_iter):
    """
    JIT-compiled Multibrot fractal kernel: z = z^power + c from z = 0.

    Args:
        c_real: Real coordinate of every column
        c_imag: Imaginary coordinate of every row
        power: Exponent for the iteration
        max_iter: Maximum iterations

    Returns:
        (rows, columns) int32 iteration counts
    """
    height = c_imag.shape[0]
    width = c_real.shape[0]
    iterations = np.empty((height, width), dtype=np.int32)

    for i in range(height):
        ci = c_imag[i]
        for j in range(width):
            cr = c_real[j]
            zr = 0.0
            zi = 0.0
            n = 0
            while n < max_iter:
                r_sq = zr * zr + zi * zi
                if power == 2.0:
                    zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
                elif power == 3.0:
                    # z^3 = (a+bi)^3 = a^3 - 3ab^2 + i(3a^2b - b^3)
                    zr, zi = (zr * zr * zr - 3.0 * zr * zi * zi + cr,
                              3.0 * zr * zr * zi - zi * zi * zi + ci)
                elif r_sq == 0.0:
                    if power < 0.0:
                        # 0 raised to a negative power diverges
                        break
                    zr = cr
                    zi = ci
                else:
                    # General power in polar form
                    r = r_sq ** (power / 2.0)
                    theta = power * math.atan2(zi, zr)
                    zr = r * math.cos(theta) + cr
                    zi = r * math.sin(theta) + ci
                if zr * zr + zi * zi > ESCAPE_RADIUS_SQ:
                    break
                n += 1
            iterations[i, j] = n

    return iterations


@jit(nopython=True, nogil=True, cache=True)
def newton_kernel(z_real, z_imag, roots_real, roots_imag, max_iter, tolerance):
    """
    JIT-compiled Newton iteration for f(z) = z^3 - 1.

    Near-zero derivatives are replaced by a small epsilon so that no infinity
    or NaN reaches the output.

    Args:
        z_real: Real coordinate of every column
        z_imag: Imaginary coordinate of every row
        roots_real, roots_imag: Known roots of f
        max_iter: Maximum iterations
        tolerance: Squared distance at which a sample counts as converged

    Returns:
        Tuple of (iterations, root_index); root_index is -1 and iterations is
        max_iter where the sample did not converge
    """
    height = z_imag.shape[0]
    width = z_real.shape[0]
    n_roots = roots_real.shape[0]
    iterations = np.empty((height, width), dtype=np.int32)
    root_index = np.empty((height, width), dtype=np.int8)

    for i in range(height):
        for j in range(width):
            zr = z_real[j]
            zi = z_imag[i]
            found = -1
            n = 0
            while True:
                for k in range(n_roots):
                    dr = zr - roots_real[k]
                    di = zi - roots_imag[k]
                    if dr * dr + di * di < tolerance:
                        found = k
                        break
                if found >= 0 or n >= max_iter:
                    break

                z2r = zr * zr - zi * zi
                z2i = 2.0 * zr * zi
                fr = z2r * zr - z2i * zi - 1.0
                fi = z2r * zi + z2i * zr
                dfr = 3.0 * z2r
                dfi = 3.0 * z2i
                denom = dfr * dfr + dfi * dfi
                if denom < DERIVATIVE_EPSILON:
                    dfr = math.sqrt(DERIVATIVE_EPSILON)
                    dfi = 0.0
                    denom = DERIVATIVE_EPSILON
                zr -= (fr * dfr + fi * dfi) / denom
                zi -= (fi * dfr - fr * dfi) / denom
                n += 1

            if found < 0:
                iterations[i, j] = max_iter
            else:
                iterations[i, j] = n
            root_index[i, j] = found

    return iterations, root_index


@jit(nopython=True, nogil=True, cache=True)
def lorenz_trajectory(x, y, z, steps, dt, sigma, rho, beta):
    """
    Euler-integrate the Lorenz system.

    Returns:
        (steps, 3) array of the state after every step
    """
    states = np.empty((steps, 3), dtype=np.float64)
    for n in range(steps):
        dx = sigma * (y - x)
        dy = x * (rho - z) - y
        dz = x * y - beta * z
        x += dx * dt
        y += dy * dt
        z += dz * dt
        states[n, 0] = x
        states[n, 1] = y
        states[n, 2] = z
    return states


@jit(nopython=True, nogil=True, cache=True)
def rossler_trajectory(x, y, z, steps, dt, a, b, c):
    """
    Euler-integrate the Rossler system.

    Returns:
        (steps, 3) array of the state after every step
    """
    states = np.empty((steps, 3), dtype=np.float64)
    for n in range(steps):
        dx = -y - z
        dy = x + a * y
        dz = b + z * (x - c)
        x += dx * dt
        y += dy * dt
        z += dz * dt
        states[n, 0] = x
        states[n, 1] = y
        states[n, 2] = z
    return states


@jit(nopython=True, nogil=True, cache=True)
def henon_orbit(x, y, steps, a, b):
    """Iterate the Henon map x' = 1 - a x^2 + y, y' = b x."""
    states = np.empty((steps, 2), dtype=np.float64)
    for n in range(steps):
        x, y = 1.0 - a * x * x + y, b * x
        states[n, 0] = x
        states[n, 1] = y
    return states


@jit(nopython=True, nogil=True, cache=True)
def gingerbreadman_orbit(x, y, steps):
    """Iterate the Gingerbreadman map x' = 1 - y + |x|, y' = x."""
    states = np.empty((steps, 2), dtype=np.float64)
    for n in range(steps):
        x, y = 1.0 - y + abs(x), x
        states[n, 0] = x
        states[n, 1] = y
    return states


@jit(nopython=True, nogil=True, cache=True)
def clifford_orbit(x, y, steps, a, b, c, d):
    """Iterate the Clifford attractor map."""
    states = np.empty((steps, 2), dtype=np.float64)
    for n in range(steps):
        x, y = (math.sin(a * y) + c * math.cos(a * x),
                math.sin(b * x) + d * math.cos(b * y))
        states[n, 0] = x
        states[n, 1] = y
    return states


@jit(nopython=True, nogil=True, cache=True)
def de_jong_orbit(x, y, steps, a, b, c, d):
    """Iterate the Peter de Jong attractor map."""
    states = np.empty((steps, 2), dtype=np.float64)
    for n in range(steps):
        x, y = (math.sin(a * y) - math.cos(b * x),
                math.sin(c * x) - math.cos(d * y))
        states[n, 0] = x
        states[n, 1] = y
    return states


@jit(nopython=True, nogil=True, cache=True)
def chaos_game_orbit(x, y, choices, matrices, translations):
    """
    Apply the pre-drawn sequence of affine maps of an iterated function system.

    Args:
        x, y: Starting point
        choices: Index of the transform applied at every step
        matrices: (k, 2, 2) linear parts
        translations: (k, 2) offsets

    Returns:
        (len(choices), 2) array of visited points
    """
    steps = choices.shape[0]
    states = np.empty((steps, 2), dtype=np.float64)
    for n in range(steps):
        k = choices[n]
        x, y = (matrices[k, 0, 0] * x + matrices[k, 0, 1] * y + translations[k, 0],
                matrices[k, 1, 0] * x + matrices[k, 1, 1] * y + translations[k, 1])
        states[n, 0] = x
        states[n, 1] = y
    return states


class NumbaAccelerator:
    """Array-level entry points over the JIT-compiled escape-time kernels."""

    def mandelbrot_iteration(self, c_real, c_imag, max_iter):
        """
        Accelerated Mandelbrot computation.

        Args:
            c_real: Real coordinate of every column
            c_imag: Imaginary coordinate of every row
            max_iter: Maximum iterations

        Returns:
            IterationResult
        """
        return IterationResult(mandelbrot_kernel(_f64(c_real), _f64(c_imag), int(max_iter)))

    def julia_iteration(self, z_real, z_imag, c, max_iter):
        """
        Accelerated Julia set computation.

        Args:
            z_real: Real coordinate of every column
            z_imag: Imaginary coordinate of every row
            c: Julia constant
            max_iter: Maximum iterations

        Returns:
            IterationResult
        """
        c = complex(c)
        return IterationResult(julia_kernel(
            _f64(z_real), _f64(z_imag), float(c.real), float(c.imag), int(max_iter)
        ))

    def tricorn_iteration(self, c_real, c_imag, max_iter):
        """Accelerated Tricorn computation."""
        return IterationResult(tricorn_kernel(_f64(c_real), _f64(c_imag), int(max_iter)))

    def burning_ship_iteration(self, c_real, c_imag, max_iter):
        """Accelerated Burning Ship computation."""
        return IterationResult(burning_ship_kernel(_f64(c_real), _f64(c_imag), int(max_iter)))

    def multibrot_iteration(self, c_real, c_imag, power, max_iter):
        """Accelerated Multibrot computation."""
        return IterationResult(multibrot_kernel(
            _f64(c_real), _f64(c_imag), float(power), int(max_iter)
        ))

    def newton_iteration(self, z_real, z_imag, max_iter, tolerance):
        """
        Accelerated Newton iteration for z^3 - 1.

        Returns:
            IterationResult with root indices
        """
        iterations, roots = newton_kernel(
            _f64(z_real), _f64(z_imag), NEWTON_ROOTS_REAL, NEWTON_ROOTS_IMAG,
            int(max_iter), float(tolerance)
        )
        return IterationResult(iterations, roots)


def _f64(values) -> np.ndarray:
    return np.ascontiguousarray(values, dtype=np.float64)


# Global accelerator instance
_numba_accelerator = None


def get_numba_accelerator() -> NumbaAccelerator:
    """Get the global Numba accelerator instance."""
    global _numba_accelerator
    if _numba_accelerator is None:
        _numba_accelerator = NumbaAccelerator()
    return _numba_accelerator
