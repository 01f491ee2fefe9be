"""Utility helpers shared across the gateway."""
