"""Ambient concerns: configuration, errors, observability and id generation."""
