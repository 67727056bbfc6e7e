"""Face-based login verification service."""
