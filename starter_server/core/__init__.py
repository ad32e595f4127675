"""Core building blocks: settings, schemas, exceptions and utilities."""
