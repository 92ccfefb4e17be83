"""BufferView tests."""
