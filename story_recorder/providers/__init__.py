"""Concrete implementations of the story_recorder interfaces."""
