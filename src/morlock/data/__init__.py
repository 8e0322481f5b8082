"""Package data for Morlock (static pages)."""
