"""Memory snapshot tests."""
