"""Response data models."""
