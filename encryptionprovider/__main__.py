"""Entry point for `python -m encryptionprovider`.

Usage:
    python -m encryptionprovider run
    python -m encryptionprovider resolve --secret-file secret.json
"""

from __future__ import annotations

from encryptionprovider.cli.main import cli

cli()
