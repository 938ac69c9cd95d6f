"""Gatekeep: account registration, credential verification and session lifecycle."""

__version__ = "0.1.0"
