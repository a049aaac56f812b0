# filetoken/server.py
"""
HTTP server for the file registry.

Provides a JSON API over a single FileRegistry.

Endpoints:
    POST /files                     - Register a file
    GET  /files/:id                 - Get a record
    GET  /files/:id/owner           - Owner of a file id
    GET  /signatures/:sig           - Id registered for a signature
    GET  /signatures/:sig/owner     - Owner of a signature
    GET  /owners/:owner/files       - Ids registered by an owner
    GET  /events?after=N            - Creation events after file id N
    GET  /stats                     - Registry counters
    GET  /health                    - Liveness
"""

import json
import logging
import threading
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, unquote, urlparse

from .config import Settings, load_settings
from .errors import (
    DuplicateSignature,
    IdNotFound,
    InvalidId,
    InvalidSignatureLength,
    RegistryError,
    SignatureNotFound,
    Unauthorized,
)
from .identity import address_from_public_key, verify_request
from .registry import FileRegistry

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InvalidSignatureLength: 400,
    InvalidId: 400,
    Unauthorized: 401,
    IdNotFound: 404,
    SignatureNotFound: 404,
    DuplicateSignature: 409,
}


class BadRequest(Exception):
    """Malformed request body or parameters."""


def _status_for(error: RegistryError) -> int:
    for cls, status in ERROR_STATUS.items():
        if isinstance(error, cls):
            return status
    return 500


def _parse_id(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise InvalidId(text)


class RegistryServer:
    """
    HTTP server for the file registry.

    Usage:
        server = RegistryServer(FileRegistry("/var/lib/filetoken"), port=8545)
        server.start()  # Blocking
    """

    def __init__(
        self,
        registry: FileRegistry,
        host: str = "127.0.0.1",
        port: int = 8545,
        require_auth: bool = False,
    ):
        self.registry = registry
        self.host = host
        self.port = port
        self.require_auth = require_auth
        self._httpd: Optional[ThreadingHTTPServer] = None

    def resolve_owner(self, body: Dict[str, Any]) -> str:
        """
        Determine the caller identity for a registration.

        With require_auth the body must carry ``public_key`` and a ``proof``
        over ``{"name", "signature"}``; the owner is the key's address.
        Otherwise the body's ``owner`` field is taken as given.
        """
        if self.require_auth:
            public_key = body.get("public_key")
            proof = body.get("proof")
            payload = {"name": body.get("name"), "signature": body.get("signature")}
            if not public_key or not verify_request(payload, proof, public_key):
                raise Unauthorized()
            return address_from_public_key(public_key)

        owner = body.get("owner")
        if not isinstance(owner, str) or not owner:
            raise BadRequest("Missing owner")
        return owner

    def register(self, body: Dict[str, Any]) -> int:
        name = body.get("name")
        if not isinstance(name, str):
            raise BadRequest("Missing name")
        signature = body.get("signature")
        owner = self.resolve_owner(body)
        return self.registry.create(name, signature, owner)

    def stats(self) -> Dict[str, Any]:
        return {
            "total_files": len(self.registry),
            "next_id": self.registry.next_id,
            "owners": len(self.registry.owners()),
            "events": len(self.registry.events),
        }

    def route_get(self, path: str, query: Dict[str, list]) -> Tuple[int, Any]:
        """Dispatch a GET request; returns (status, body)."""
        parts = [unquote(p) for p in path.split("/")[1:]]

        if parts == ["health"]:
            return 200, {"status": "ok"}

        if parts == ["stats"]:
            return 200, self.stats()

        if parts == ["events"]:
            after = query.get("after", ["0"])[0]
            try:
                after = int(after)
            except ValueError:
                raise BadRequest(f"Invalid after: {after}")
            events = self.registry.events_since(after)
            return 200, {"events": [e.to_dict() for e in events]}

        if len(parts) == 2 and parts[0] == "files":
            record = self.registry.get(_parse_id(parts[1]))
            return 200, record.to_dict()

        if len(parts) == 3 and parts[0] == "files" and parts[2] == "owner":
            return 200, {"owner": self.registry.lookup_owner(_parse_id(parts[1]))}

        if len(parts) == 2 and parts[0] == "signatures":
            return 200, {"id": self.registry.lookup_id_by_signature(parts[1])}

        if len(parts) == 3 and parts[0] == "signatures" and parts[2] == "owner":
            return 200, {"owner": self.registry.lookup_owner_by_signature(parts[1])}

        if len(parts) == 3 and parts[0] == "owners" and parts[2] == "files":
            return 200, {"ids": self.registry.list_ids_by_owner(parts[1])}

        return 404, {"error": "Not found", "code": "NotFound"}

    def _create_handler(server_instance):
        """Create request handler with access to server instance."""

        class RequestHandler(BaseHTTPRequestHandler):
            server_ref = server_instance

            def log_message(self, format, *args):
                logger.debug(format % args)

            def _send_json(self, data: Any, status: int = 200):
                body = json.dumps(data).encode()
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            def _send_error(self, message: str, status: int = 400, code: str = "BadRequest"):
                self._send_json({"error": message, "code": code}, status)

            def _send_registry_error(self, error: RegistryError):
                status = _status_for(error)
                logger.warning(f"{self.command} {self.path} -> {status} {error.code}")
                self._send_json(error.to_dict(), status)

            def do_GET(self):
                parsed = urlparse(self.path)
                try:
                    status, data = self.server_ref.route_get(parsed.path, parse_qs(parsed.query))
                    self._send_json(data, status)
                except RegistryError as e:
                    self._send_registry_error(e)
                except BadRequest as e:
                    self._send_error(str(e))
                except Exception as e:
                    logger.exception(f"GET {self.path} failed")
                    self._send_error(str(e), 500, "InternalError")

            def do_POST(self):
                if urlparse(self.path).path.rstrip("/") != "/files":
                    self._send_error("Not found", 404, "NotFound")
                    return
                try:
                    content_length = int(self.headers.get("Content-Length", 0))
                    body = self.rfile.read(content_length).decode()
                    data = json.loads(body)
                    if not isinstance(data, dict):
                        raise BadRequest("Request body must be a JSON object")

                    file_id = self.server_ref.register(data)
                    self._send_json({"id": file_id}, 201)
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    self._send_error(f"Invalid JSON: {e}")
                except RegistryError as e:
                    self._send_registry_error(e)
                except BadRequest as e:
                    self._send_error(str(e))
                except Exception as e:
                    logger.exception(f"POST {self.path} failed")
                    self._send_error(str(e), 500, "InternalError")

        return RequestHandler

    def bind(self) -> ThreadingHTTPServer:
        """Create the listening socket. Port 0 picks a free port."""
        if self._httpd is None:
            handler = self._create_handler()
            self._httpd = ThreadingHTTPServer((self.host, self.port), handler)
            self.host, self.port = self._httpd.server_address[:2]
        return self._httpd

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def start(self):
        """Start the HTTP server (blocking)."""
        httpd = self.bind()
        logger.info(f"Registry server starting on {self.host}:{self.port}")
        print(f"Registry server running on {self.url}")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            print("\nShutting down...")
        finally:
            httpd.server_close()

    def start_background(self) -> threading.Thread:
        """Start the server in a background thread."""
        httpd = self.bind()
        logger.info(f"Registry server starting on {self.host}:{self.port}")
        thread = threading.Thread(target=httpd.serve_forever)
        thread.daemon = True
        thread.start()
        return thread

    def shutdown(self):
        """Stop a server started with start_background()."""
        if self._httpd is not None:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._httpd = None


def serve(settings: Settings) -> None:
    """Run a server for the registry under settings.data_dir."""
    registry = FileRegistry(settings.registry_dir)
    server = RegistryServer(
        registry,
        host=settings.host,
        port=settings.port,
        require_auth=settings.require_auth,
    )
    server.start()


def main():
    """CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="File registry server")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--host", help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    parser.add_argument("--data-dir", help="Data directory")
    parser.add_argument("--require-auth", action="store_true", default=None,
                        help="Require signed registration requests")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    args = parser.parse_args()

    settings = load_settings(
        args.config,
        host=args.host,
        port=args.port,
        data_dir=args.data_dir,
        require_auth=args.require_auth,
    )

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    serve(settings)


if __name__ == "__main__":
    main()
