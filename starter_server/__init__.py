"""Starter server: FastAPI + Strawberry GraphQL over PostgreSQL."""

__version__ = "0.1.0"
