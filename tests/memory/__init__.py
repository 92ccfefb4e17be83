"""MemoryBlock allocation, wrapping, reallocation and lifetime tests."""
