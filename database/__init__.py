"""Persistence layer: ORM models, engine factory and the user store."""
