"""External interfaces to the registry."""
