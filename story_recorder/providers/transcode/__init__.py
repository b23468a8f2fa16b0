"""Transcoder providers."""
