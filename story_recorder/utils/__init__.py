"""Shared utilities: errors, logging, JSON file I/O and file relocation."""
