"""Collector package.

Keeps the SecretCache in sync with the cluster.

Submodules
----------
watcher -- SecretWatcher: list+watch loop, exponential back-off, relist on 410.
"""

from encryptionprovider.collector.watcher import SecretWatcher

__all__ = ["SecretWatcher"]
