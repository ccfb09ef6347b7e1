"""Domain layer: entities, identifiers, errors and events."""
