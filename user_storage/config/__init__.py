"""Configuration module for the user storage federation service."""
from .settings import AppConfig, load_settings
from .realm import load_realm

__all__ = ["AppConfig", "load_settings", "load_realm"]
