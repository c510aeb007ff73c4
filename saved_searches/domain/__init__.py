"""Domain layer: entities, value objects, ports and pure domain services."""
