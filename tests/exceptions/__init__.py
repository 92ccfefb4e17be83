"""Exception hierarchy tests."""
