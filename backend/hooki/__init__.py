"""Hooki backend: realtime messaging and proximity core."""
