"""Application use cases (orchestrate repositories, engine services and notifications)."""
