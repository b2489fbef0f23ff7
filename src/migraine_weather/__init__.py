"""Barometric pressure ingestion and migraine-risk warnings."""

__version__ = "0.1.0"
