"""Application state and ports shared by adapters."""
