"""Services module for Bunny Todo - Business logic layer."""
