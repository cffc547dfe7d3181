"""Post-processing helpers (plots) for inspecting a field outside the host renderer."""
