"""Buffer tests."""
