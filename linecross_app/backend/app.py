from __future__ import annotations

import argparse
import json
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, List, Optional
from urllib.parse import urlparse

from loguru import logger
from pydantic import ValidationError

from linecross_app.auth import CredentialCheck, StaticTokenCheck
from linecross_app.core.logging import configure_logging
from linecross_app.core.settings import ServiceSettings, service_settings
from linecross_app.errors import BadRequest, InternalError, LoadError, MethodNotAllowed, ServiceError, Unauthorized
from linecross_app.intersections import find_intersections
from linecross_app.models import Intersection, LineString
from linecross_app.reference_set import load_scattered_lines, parse_json

TOOL_VERSION = "1.0.0"
INTERSECTIONS_PATH = "/intersections"


class IntersectionServer(ThreadingHTTPServer):
    """Threaded server carrying read-only configuration for its handlers."""

    def __init__(self, settings: ServiceSettings, credential_check: Optional[CredentialCheck] = None) -> None:
        self.settings = settings
        self.credential_check = credential_check or StaticTokenCheck(expected=settings.auth_token)
        super().__init__((settings.host, settings.port), IntersectionHandler)


def _empty_response(handler: BaseHTTPRequestHandler, status: int, headers: Optional[dict] = None) -> None:
    handler.send_response(status)
    for k, v in (headers or {}).items():
        handler.send_header(k, v)
    handler.send_header("Content-Length", "0")
    handler.end_headers()


def _json_response(handler: BaseHTTPRequestHandler, status: int, raw: bytes) -> None:
    handler.send_response(status)
    handler.send_header("Content-Type", "application/json")
    handler.send_header("Content-Length", str(len(raw)))
    handler.end_headers()
    handler.wfile.write(raw)


def _encode(results: List[Intersection]) -> bytes:
    try:
        return json.dumps([r.to_wire() for r in results], allow_nan=False).encode("utf-8")
    except ValueError as e:
        raise InternalError(f"Result serialization failed: {e}") from e


class IntersectionHandler(BaseHTTPRequestHandler):
    server_version = "LineCross/" + TOOL_VERSION
    server: IntersectionServer

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(f"{self.address_string()} {format % args}")

    def _dispatch(self) -> None:
        path = urlparse(self.path).path
        if path != INTERSECTIONS_PATH:
            _empty_response(self, HTTPStatus.NOT_FOUND)
            return

        try:
            body = self._intersections()
        except ServiceError as e:
            if e.status >= 500:
                logger.error(f"{self.command} {path} -> {int(e.status)}: {e}")
            else:
                logger.warning(f"{self.command} {path} -> {int(e.status)}: {e}")
            headers = {"Allow": "POST"} if isinstance(e, MethodNotAllowed) else None
            _empty_response(self, e.status, headers)
            return
        except Exception:
            logger.exception(f"{self.command} {path} failed")
            _empty_response(self, HTTPStatus.INTERNAL_SERVER_ERROR)
            return

        _json_response(self, HTTPStatus.OK, body)

    def _intersections(self) -> bytes:
        if self.command != "POST":
            raise MethodNotAllowed(f"{self.command} not allowed")

        check = self.server.credential_check
        if not check.is_authorized(self.headers.get(check.header)):
            raise Unauthorized("missing or unexpected authorization header")

        linestring = self._read_linestring()

        try:
            scattered_lines = load_scattered_lines(self.server.settings.reference_path)
        except LoadError as e:
            raise InternalError(str(e)) from e

        results = find_intersections(linestring, scattered_lines)
        logger.info(
            f"POST {INTERSECTIONS_PATH}: {len(linestring.coordinates)} vertices x "
            f"{len(scattered_lines)} scattered lines -> {len(results)} intersections"
        )
        return _encode(results)

    def _read_linestring(self) -> LineString:
        try:
            length = int(self.headers.get("Content-Length", "0") or "0")
        except ValueError as e:
            raise BadRequest("invalid Content-Length") from e
        raw = self.rfile.read(length) if length > 0 else b""

        try:
            data = parse_json(raw)
        except ValueError as e:
            raise BadRequest(f"invalid JSON body: {e}") from e
        if not isinstance(data, dict):
            raise BadRequest("body must be a JSON object")

        try:
            return LineString.model_validate(data)
        except ValidationError as e:
            raise BadRequest(f"invalid linestring: {e}") from e

    do_GET = _dispatch
    do_POST = _dispatch
    do_PUT = _dispatch
    do_PATCH = _dispatch
    do_DELETE = _dispatch
    do_HEAD = _dispatch
    do_OPTIONS = _dispatch


def run_server(settings: ServiceSettings, credential_check: Optional[CredentialCheck] = None) -> IntersectionServer:
    return IntersectionServer(settings, credential_check)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Linestring / scattered-lines intersection server")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--reference-path", default=None, help="scattered lines JSON document")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    settings = service_settings({"host": args.host, "port": args.port, "reference_path": args.reference_path})

    server = run_server(settings)
    actual_port = server.server_address[1]
    logger.info(f"Serving POST {INTERSECTIONS_PATH} on {settings.host}:{actual_port} (reference set: {settings.reference_path})")
    print(actual_port, flush=True)

    try:
        server.serve_forever(poll_interval=0.25)
        return 0
    except KeyboardInterrupt:
        return 0
    finally:
        server.server_close()


if __name__ == "__main__":
    raise SystemExit(main())
