"""Sample package processed by the generator tests."""
