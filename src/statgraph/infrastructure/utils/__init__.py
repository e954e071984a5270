"""Infrastructure utilities (weight initialization)."""
