"""Encryption provider for the OpenShift API server operator.

Resolves, on every sync pass, which group-resources this operator must keep
encrypted at rest, ceding the externally manageable subset when the OAuth API
server has taken over its own encryption configuration.
"""

__version__ = "0.3.1"
