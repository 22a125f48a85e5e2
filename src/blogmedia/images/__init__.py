"""Uploaded image retrieval and upload pipeline."""
