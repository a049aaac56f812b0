# filetoken/identity/signing.py
"""
Request signing for authenticated registrations.

A caller proves who it is by signing the registration payload with its
account key (RSA-SHA256, PKCS#1 v1.5). The server verifies the proof against
the public key sent alongside it and records the key's address as owner.
"""

import base64
import json
import time
from typing import Any, Dict

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding

from .account import Account, address_from_public_key

PROOF_TYPE = "RsaSignature2017"


def _canonicalize(data: Dict[str, Any]) -> bytes:
    """
    Canonicalize JSON for signing.

    Sorted keys, no whitespace.
    """
    return json.dumps(data, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _signed_bytes(payload: Dict[str, Any], creator: str, created: str) -> bytes:
    options = {"type": PROOF_TYPE, "creator": creator, "created": created}
    return _canonicalize({"options": options, "payload": payload})


def sign_request(payload: Dict[str, Any], account: Account) -> Dict[str, Any]:
    """
    Sign a request payload with the account's private key.

    Args:
        payload: JSON-ready request body (without the proof)
        account: The account whose key signs the payload

    Returns:
        Proof dict to send alongside the payload
    """
    private_key = serialization.load_pem_private_key(
        account.private_key,
        password=None,
    )

    created = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
    creator = account.address

    signature_bytes = private_key.sign(
        _signed_bytes(payload, creator, created),
        padding.PKCS1v15(),
        hashes.SHA256(),
    )

    return {
        "type": PROOF_TYPE,
        "creator": creator,
        "created": created,
        "signatureValue": base64.b64encode(signature_bytes).decode("utf-8"),
    }


def verify_request(payload: Dict[str, Any], proof: Dict[str, Any], public_key_pem: bytes | str) -> bool:
    """
    Verify a request proof.

    Checks that the proof was made by the key ``public_key_pem`` and that
    its creator is that key's address.

    Returns:
        True if the proof is valid
    """
    if not proof:
        return False

    if isinstance(public_key_pem, str):
        public_key_pem = public_key_pem.encode("utf-8")

    try:
        if proof.get("type") != PROOF_TYPE:
            return False
        if proof["creator"] != address_from_public_key(public_key_pem):
            return False

        public_key = serialization.load_pem_public_key(public_key_pem)
        signature_bytes = base64.b64decode(proof["signatureValue"])
        public_key.verify(
            signature_bytes,
            _signed_bytes(payload, proof["creator"], proof["created"]),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
        return True

    except (InvalidSignature, KeyError, TypeError, ValueError):
        return False
