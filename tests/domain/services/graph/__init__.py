"""Graph service tests."""
