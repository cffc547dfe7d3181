"""
The SIMULATION layer: the temperature field, the per-tick boundary mapping and
the explicit diffusion solver.
Note: pure NumPy/Numba, no rendering imports.
"""
