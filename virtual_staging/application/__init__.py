"""Application layer: use-case services orchestrating the boundary adapters."""
