"""Byte encoding and SHA-256 helpers."""
