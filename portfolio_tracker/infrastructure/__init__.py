"""Infrastructure adapters: storage backends and the upstream quote client."""
