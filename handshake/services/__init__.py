"""Service layer: cache store and Steam directory client."""
