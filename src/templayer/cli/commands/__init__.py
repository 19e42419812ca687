"""Top-level templayer commands, one module per command."""
