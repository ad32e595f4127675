"""Infrastructure adapters: database engines, logging, session auth."""
