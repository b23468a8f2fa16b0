"""Configuration module - exports Settings and load_config."""

from story_recorder.config.loader import load_config
from story_recorder.config.settings import Settings

__all__ = ["Settings", "load_config"]
