"""Mediator -- anonymous 1:1 chat relay with moderation."""

__version__ = "0.1.0"
