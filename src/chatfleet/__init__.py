"""Multi-channel chat agent fleet."""
