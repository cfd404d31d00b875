"""Contract document import engine."""
