"""Outbound HTTP access (track probing against remote asset servers)."""
