"""Payload schemas for the segment HTTP collaborators."""
