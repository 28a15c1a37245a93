"""Configuration module for the card paginator."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
