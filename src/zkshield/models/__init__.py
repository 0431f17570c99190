"""Data models for the collaborator boundary."""
