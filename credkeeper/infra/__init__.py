"""Concrete adapters implementing the service ports (Redis, HTTP)."""
