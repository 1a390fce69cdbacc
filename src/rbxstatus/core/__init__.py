"""Status normalization pipeline."""
