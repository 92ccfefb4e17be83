"""FlexBuffer tests."""
