from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Iterator, Optional, Tuple
from urllib.error import HTTPError
from urllib.request import Request, urlopen

import pytest

from linecross_app.backend.app import INTERSECTIONS_PATH, IntersectionServer, run_server
from linecross_app.core.settings import ServiceSettings

TOKEN = "Authorization"


@pytest.fixture()
def reference_file(tmp_path: Path) -> Path:
    p = tmp_path / "scattered_lines.json"
    p.write_text(json.dumps([{"id": "A", "startPoint": [0, 0], "endPoint": [2, 2]}]), encoding="utf-8")
    return p


def _serve(reference_path: Path) -> IntersectionServer:
    settings = ServiceSettings(host="127.0.0.1", port=0, reference_path=reference_path, auth_token=TOKEN)
    server = run_server(settings)
    threading.Thread(target=server.serve_forever, kwargs={"poll_interval": 0.05}, daemon=True).start()
    return server


@pytest.fixture()
def server(reference_file: Path) -> Iterator[IntersectionServer]:
    srv = _serve(reference_file)
    try:
        yield srv
    finally:
        srv.shutdown()
        srv.server_close()


def _call(
    server: IntersectionServer,
    body: Optional[bytes],
    method: str = "POST",
    token: Optional[str] = TOKEN,
    path: str = INTERSECTIONS_PATH,
) -> Tuple[int, dict, bytes]:
    url = f"http://127.0.0.1:{server.server_address[1]}{path}"
    req = Request(url, data=body, method=method)
    if token is not None:
        req.add_header("Authorization", token)
    if body is not None:
        req.add_header("Content-Type", "application/json")
    try:
        with urlopen(req, timeout=5) as resp:
            return resp.status, dict(resp.headers), resp.read()
    except HTTPError as e:
        return e.code, dict(e.headers), e.read()


def _linestring(*coords) -> bytes:
    return json.dumps({"type": "LineString", "coordinates": [list(c) for c in coords]}).encode("utf-8")


def test_smoke_crossing(server: IntersectionServer) -> None:
    status, headers, raw = _call(server, _linestring((0, 2), (2, 0)))
    assert status == 200
    assert headers["Content-Type"] == "application/json"
    assert json.loads(raw) == [{"lineID": "A", "intersection": [1.0, 1.0]}]


def test_smoke_single_vertex_returns_empty_array(server: IntersectionServer) -> None:
    status, _, raw = _call(server, _linestring((0, 0)))
    assert status == 200
    assert raw == b"[]"


def test_smoke_no_crossings_returns_empty_array(server: IntersectionServer) -> None:
    status, _, raw = _call(server, _linestring((5, 5), (6, 9)))
    assert status == 200
    assert json.loads(raw) == []


def test_smoke_collinear_overlap_has_null_point(server: IntersectionServer) -> None:
    status, _, raw = _call(server, _linestring((1, 1), (3, 3)))
    assert status == 200
    assert json.loads(raw) == [{"lineID": "A", "intersection": None}]


def test_smoke_missing_authorization(server: IntersectionServer) -> None:
    status, _, raw = _call(server, _linestring((0, 2), (2, 0)), token=None)
    assert status == 401
    assert raw == b""


def test_smoke_wrong_authorization(server: IntersectionServer) -> None:
    status, _, raw = _call(server, _linestring((0, 2), (2, 0)), token="Bearer nope")
    assert status == 401
    assert raw == b""


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
def test_smoke_method_not_allowed(server: IntersectionServer, method: str) -> None:
    body = None if method == "GET" else _linestring((0, 2), (2, 0))
    status, headers, raw = _call(server, body, method=method)
    assert status == 405
    assert headers.get("Allow") == "POST"
    assert raw == b""


def test_smoke_method_checked_before_authorization(server: IntersectionServer) -> None:
    status, _, _ = _call(server, None, method="GET", token=None)
    assert status == 405


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"{not json",
        b"[]",
        b'{"type": "LineString", "coordinates": [[0, 0], [1]]}',
        b'{"type": "LineString", "coordinates": [[0, 0], ["1", 2]]}',
        b'{"type": "LineString", "coordinates": [[0, 0], [NaN, 2]]}',
        b'{"type": "LineString", "coordinates": [[0, 1e400], [0, -1e400]]}',
    ],
)
def test_smoke_bad_request(server: IntersectionServer, body: bytes) -> None:
    status, _, raw = _call(server, body)
    assert status == 400
    assert raw == b""


def test_smoke_unknown_path(server: IntersectionServer) -> None:
    status, _, _ = _call(server, _linestring((0, 2), (2, 0)), path="/other")
    assert status == 404


def test_smoke_missing_reference_set(tmp_path: Path) -> None:
    srv = _serve(tmp_path / "missing.json")
    try:
        status, _, raw = _call(srv, _linestring((0, 2), (2, 0)))
    finally:
        srv.shutdown()
        srv.server_close()
    assert status == 500
    assert raw == b""


def test_smoke_malformed_reference_set(tmp_path: Path) -> None:
    p = tmp_path / "scattered_lines.json"
    p.write_text('{"id": "A"}', encoding="utf-8")
    srv = _serve(p)
    try:
        status, _, _ = _call(srv, _linestring((0, 2), (2, 0)))
    finally:
        srv.shutdown()
        srv.server_close()
    assert status == 500


def test_smoke_unserializable_point(tmp_path: Path) -> None:
    # a real crossing whose line-equation terms overflow, leaving a NaN point
    p = tmp_path / "scattered_lines.json"
    p.write_text(json.dumps([{"id": "big", "startPoint": [1e200, 1e200], "endPoint": [1e200, 3e200]}]), encoding="utf-8")
    srv = _serve(p)
    try:
        status, _, _ = _call(srv, _linestring((0, 2e200), (2e200, 2e200)))
    finally:
        srv.shutdown()
        srv.server_close()
    assert status == 500


def test_smoke_reference_set_reread_per_request(server: IntersectionServer, reference_file: Path) -> None:
    status, _, raw = _call(server, _linestring((0, 2), (2, 0)))
    assert json.loads(raw)[0]["lineID"] == "A"

    reference_file.write_text(json.dumps([{"id": "Z", "startPoint": [0, 0], "endPoint": [2, 2]}]), encoding="utf-8")
    status, _, raw = _call(server, _linestring((0, 2), (2, 0)))
    assert status == 200
    assert json.loads(raw) == [{"lineID": "Z", "intersection": [1.0, 1.0]}]


def test_smoke_null_coordinates_is_empty_polyline(server: IntersectionServer) -> None:
    status, _, raw = _call(server, b'{"type": "LineString", "coordinates": null}')
    assert status == 200
    assert raw == b"[]"
