"""Logging tests."""
