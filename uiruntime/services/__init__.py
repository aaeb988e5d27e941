"""Runtime services: validation, resolution, state and dispatch."""
