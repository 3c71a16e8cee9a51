"""Core utilities for the Meghna backend."""

from .errors import ServiceError, register_error_handlers

__all__ = ["ServiceError", "register_error_handlers"]
