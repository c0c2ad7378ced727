"""Bunny Todo - personal task tracker with remote and local storage."""

__version__ = "0.3.0"
