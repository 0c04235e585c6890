"""Domain layer: resource data, schema declarations and database rules."""
