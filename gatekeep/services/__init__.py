"""Service layer: authentication engine, session guard, maintenance, reporting."""
