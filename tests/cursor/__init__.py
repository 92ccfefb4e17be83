"""BufferReader and BufferWriter tests."""
