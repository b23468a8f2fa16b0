"""Metadata store providers."""
