"""Slash command registration and shared interaction helpers."""
