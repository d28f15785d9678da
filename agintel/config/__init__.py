"""Configuration package for the intelligence pipeline."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
