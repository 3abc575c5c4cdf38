"""Recovery service tests."""
