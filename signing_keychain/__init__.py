"""
Temporary code-signing keychains for macOS CI jobs.

This package creates an isolated keychain, imports PKCS#12 signing
certificates into it and removes it again when the job is done.
"""

__version__ = "0.1.0"
