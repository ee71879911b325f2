"""Hashing and encoding helpers."""
