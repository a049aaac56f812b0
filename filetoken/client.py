# filetoken/client.py
"""
Client SDK for the registry server.

Exposes the same operations as FileRegistry, so callers (and the CLI) can
swap a local registry for a remote one.

Usage:
    client = RegistryClient("http://localhost:8545")

    file_id = client.create("Sales report", signature, "alice")
    client.lookup_owner(file_id)   # -> "alice"

    # Against a server that requires signed requests
    account = AccountStore("~/.filetoken/accounts").get("alice")
    client.create("Sales report", signature, account)
"""

import json
from typing import Any, Dict, List, Union
from urllib.parse import quote
from urllib.request import urlopen, Request
from urllib.error import HTTPError, URLError

from .errors import ERRORS_BY_CODE
from .events import NewFileEvent
from .identity import Account, sign_request
from .registry import FileRecord


class RegistryClient:
    """
    Client for the registry server.

    Args:
        base_url: Server URL (e.g., "http://localhost:8545")
        timeout: Request timeout in seconds
    """

    def __init__(self, base_url: str = "http://localhost:8545", timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(self, method: str, path: str, data: dict = None) -> dict:
        """Make HTTP request to server."""
        url = f"{self.base_url}{path}"

        if data is not None:
            body = json.dumps(data).encode()
            headers = {"Content-Type": "application/json"}
        else:
            body = None
            headers = {}

        req = Request(url, data=body, headers=headers, method=method)

        try:
            with urlopen(req, timeout=self.timeout) as response:
                return json.loads(response.read().decode())
        except HTTPError as e:
            error_body = e.read().decode()
            try:
                error_data = json.loads(error_body)
            except json.JSONDecodeError:
                raise RuntimeError(f"HTTP {e.code}: {error_body}")
            error_cls = ERRORS_BY_CODE.get(error_data.get("code"))
            if error_cls is not None:
                raise error_cls(error_data.get("detail"))
            raise RuntimeError(error_data.get("error", str(e)))
        except URLError as e:
            raise ConnectionError(f"Failed to connect to server: {e}")

    def health(self) -> bool:
        """Check if server is healthy."""
        try:
            result = self._request("GET", "/health")
            return result.get("status") == "ok"
        except (ConnectionError, RuntimeError):
            return False

    def create(self, name: str, signature: str, owner: Union[str, Account]) -> int:
        """
        Register a file.

        Args:
            name: Display name
            signature: 64-character content signature
            owner: Owner identity, or an Account to sign the request with

        Returns:
            The id assigned by the server
        """
        payload = {"name": name, "signature": signature}
        if isinstance(owner, Account):
            body = dict(payload)
            body["public_key"] = owner.public_key.decode("utf-8")
            body["proof"] = sign_request(payload, owner)
        else:
            body = dict(payload, owner=owner)
        return self._request("POST", "/files", body)["id"]

    def lookup_id_by_signature(self, signature: str) -> int:
        return self._request("GET", f"/signatures/{quote(signature, safe='')}")["id"]

    def lookup_owner(self, file_id: int) -> str:
        return self._request("GET", f"/files/{file_id}/owner")["owner"]

    def lookup_owner_by_signature(self, signature: str) -> str:
        return self._request("GET", f"/signatures/{quote(signature, safe='')}/owner")["owner"]

    def list_ids_by_owner(self, owner: str) -> List[int]:
        return self._request("GET", f"/owners/{quote(owner, safe='')}/files")["ids"]

    def get(self, file_id: int) -> FileRecord:
        """Get a full record by id."""
        return FileRecord.from_dict(self._request("GET", f"/files/{file_id}"))

    def events(self, after: int = 0) -> List[NewFileEvent]:
        """Creation events for files with id greater than ``after``."""
        data = self._request("GET", f"/events?after={after}")
        return [NewFileEvent.from_dict(e) for e in data["events"]]

    def stats(self) -> Dict[str, Any]:
        """Get registry counters."""
        return self._request("GET", "/stats")


__all__ = ["RegistryClient"]
