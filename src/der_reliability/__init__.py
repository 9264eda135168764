"""Backup reliability and outage survival for distributed energy resources."""

__version__ = "0.3.0"
