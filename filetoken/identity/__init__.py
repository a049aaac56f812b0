# filetoken/identity/__init__.py
"""
Caller identities for the file registry.

The registry treats owners as opaque keys. This package provides the
identities used by the HTTP layer and CLI:

- Account: a username with an RSA key pair and a derived address
- sign_request / verify_request: proof that a request came from an account
"""

from .account import Account, AccountStore, address_from_public_key
from .signing import sign_request, verify_request

__all__ = [
    "Account",
    "AccountStore",
    "address_from_public_key",
    "sign_request",
    "verify_request",
]
