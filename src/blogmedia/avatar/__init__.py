"""Blogger avatar endpoint."""
