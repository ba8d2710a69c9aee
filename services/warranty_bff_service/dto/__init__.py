"""Warranty BFF DTOs: backend wire models and frontend view models."""
