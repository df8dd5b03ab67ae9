"""Adapters for external judge platforms."""
