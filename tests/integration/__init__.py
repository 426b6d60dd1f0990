"""Integration tests for the delegatedispatch library."""
