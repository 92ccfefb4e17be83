"""Flexbuf test suite."""
