"""Domain-level helper contracts."""
