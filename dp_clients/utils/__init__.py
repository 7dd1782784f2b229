"""Logging and error helpers shared by every client."""
