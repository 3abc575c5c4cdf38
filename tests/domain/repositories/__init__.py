"""Class registry tests."""
