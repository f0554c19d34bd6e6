"""Data models for the validator."""
