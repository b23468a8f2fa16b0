"""Counter store providers."""
