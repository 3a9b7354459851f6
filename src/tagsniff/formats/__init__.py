"""Per-container tag readers."""
