"""Credential encryption adapters."""

from .fernet import FernetCipher

__all__ = ["FernetCipher"]
