"""Meghna realtime messaging components."""
