"""ROM loading and machine construction services."""
