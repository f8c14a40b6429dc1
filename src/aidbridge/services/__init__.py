"""Infrastructure services (in-memory entity store, seed data)."""
