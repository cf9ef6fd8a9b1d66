"""Command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``encryption-provider`` script).
"""

from encryptionprovider.cli.main import cli

__all__ = ["cli"]
