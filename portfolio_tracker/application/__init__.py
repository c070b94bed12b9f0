"""Application layer: services that coordinate domain logic and I/O."""
