"""Task view and application state."""
