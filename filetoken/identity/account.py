# filetoken/identity/account.py
"""
Caller accounts.

An Account is an identity with:
- Username and display name
- RSA key pair for signing registration requests
- An address derived from the public key, used as the registry owner
"""

import hashlib
import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def _generate_keypair() -> tuple[bytes, bytes]:
    """Generate RSA key pair for signing."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


def address_from_public_key(public_key_pem: bytes | str) -> str:
    """
    Derive an account address from a PEM public key.

    The address is the last 20 bytes of the SHA-3-256 digest of the DER
    encoded key, hex encoded with a 0x prefix.

    Raises:
        ValueError: the PEM data is not a public key
    """
    if isinstance(public_key_pem, str):
        public_key_pem = public_key_pem.encode("utf-8")
    public_key = serialization.load_pem_public_key(public_key_pem)
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return "0x" + hashlib.sha3_256(der).hexdigest()[-40:]


@dataclass
class Account:
    """
    A caller identity.

    Attributes:
        username: Unique username (e.g., "alice")
        display_name: Human-readable name
        public_key: PEM-encoded public key
        private_key: PEM-encoded private key (kept secret)
        created_at: Timestamp of creation
    """
    username: str
    display_name: str
    public_key: bytes
    private_key: bytes
    created_at: float = field(default_factory=time.time)

    @property
    def address(self) -> str:
        """Owner identity recorded in the registry."""
        return address_from_public_key(self.public_key)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for storage."""
        return {
            "username": self.username,
            "display_name": self.display_name,
            "public_key": self.public_key.decode("utf-8"),
            "private_key": self.private_key.decode("utf-8"),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        """Deserialize from storage."""
        return cls(
            username=data["username"],
            display_name=data["display_name"],
            public_key=data["public_key"].encode("utf-8"),
            private_key=data["private_key"].encode("utf-8"),
            created_at=data.get("created_at", time.time()),
        )

    @classmethod
    def create(cls, username: str, display_name: str = None) -> "Account":
        """Create a new account with generated keys."""
        private_pem, public_pem = _generate_keypair()
        return cls(
            username=username,
            display_name=display_name or username,
            public_key=public_pem,
            private_key=private_pem,
        )


class AccountStore:
    """
    Persistent storage for accounts.

    Structure:
        store_dir/
            accounts.json     # All accounts, keys included
    """

    def __init__(self, store_dir: Path | str):
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)
        self._accounts: Dict[str, Account] = {}
        self._load()

    def _index_path(self) -> Path:
        return self.store_dir / "accounts.json"

    def _load(self):
        """Load accounts from disk."""
        index_path = self._index_path()
        if index_path.exists():
            with open(index_path) as f:
                data = json.load(f)
            self._accounts = {
                username: Account.from_dict(account_data)
                for username, account_data in data.get("accounts", {}).items()
            }

    def _save(self):
        """Save accounts to disk."""
        data = {
            "version": "1.0",
            "accounts": {
                username: account.to_dict()
                for username, account in self._accounts.items()
            },
        }
        with open(self._index_path(), "w") as f:
            json.dump(data, f, indent=2)

    def create(self, username: str, display_name: str = None) -> Account:
        """Create and store a new account."""
        if username in self._accounts:
            raise ValueError(f"Account {username} already exists")

        account = Account.create(username, display_name)
        self._accounts[username] = account
        self._save()
        return account

    def get(self, username: str) -> Optional[Account]:
        """Get an account by username."""
        return self._accounts.get(username)

    def list(self) -> list[Account]:
        """List all accounts."""
        return list(self._accounts.values())

    def __contains__(self, username: str) -> bool:
        return username in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)
