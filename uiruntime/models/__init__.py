"""UI-JSON runtime models."""
