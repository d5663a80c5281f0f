from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from loguru import logger

from linecross_app.analysis.geometry import (
    Orientation,
    intersection_point,
    is_on_segment,
    orientation,
    polyline_segments,
    segments_intersect,
)
from linecross_app.auth import StaticTokenCheck
from linecross_app.core.logging import configure_logging
from linecross_app.core.paths import default_reference_path, settings_path
from linecross_app.core.settings import DEFAULT_PORT, load_settings, service_settings
from linecross_app.errors import LoadError, MalformedData, NotFound
from linecross_app.intersections import find_intersections
from linecross_app.models import LineString, ScatteredLine
from linecross_app.reference_set import load_scattered_lines


def _line(line_id: str, start, end) -> ScatteredLine:
    return ScatteredLine(id=line_id, start_point=start, end_point=end)


def _query(*coords) -> LineString:
    return LineString(coordinates=list(coords))


def _write(tmp_path: Path, payload) -> Path:
    p = tmp_path / "scattered_lines.json"
    p.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return p


# --- geometry primitives

def test_orientation_labels() -> None:
    assert orientation((0, 0), (1, 1), (2, 2)) is Orientation.COLLINEAR
    assert orientation((0, 0), (0, 1), (1, 1)) is Orientation.CLOCKWISE
    assert orientation((0, 0), (1, 0), (1, 1)) is Orientation.COUNTER_CLOCKWISE


def test_orientation_degenerate_segment_is_collinear() -> None:
    assert orientation((1, 1), (1, 1), (5, -3)) is Orientation.COLLINEAR


def test_is_on_segment_bounding_box() -> None:
    assert is_on_segment((0, 0), (1, 1), (2, 2))
    assert is_on_segment((0, 0), (2, 2), (2, 2))
    assert not is_on_segment((0, 0), (3, 1), (2, 2))
    # bounding-box only: off-line points inside the box pass
    assert is_on_segment((0, 0), (2, 0), (2, 2))


def test_polyline_segments() -> None:
    assert polyline_segments([]) == []
    assert polyline_segments([(0, 0)]) == []
    assert polyline_segments([(0, 0), (1, 0), (1, 1)]) == [((0, 0), (1, 0)), ((1, 0), (1, 1))]


def test_disjoint_bounding_boxes_do_not_intersect() -> None:
    assert not segments_intersect((0, 0), (1, 0), (2, 1), (3, 5))
    assert not segments_intersect((0, 0), (1, 1), (5, 5), (6, 9))


def test_interior_crossing_point_lies_on_both_lines() -> None:
    p1, p2, q1, q2 = (0.0, 0.0), (4.0, 2.0), (0.0, 3.0), (3.0, 0.0)
    assert segments_intersect(p1, p2, q1, q2)
    x, y = intersection_point(p1, p2, q1, q2)
    assert (x, y) == pytest.approx((2.0, 1.0))
    # y = x / 2 and x + y = 3
    assert y == pytest.approx(x / 2.0)
    assert x + y == pytest.approx(3.0)


def test_parallel_non_collinear_segments_do_not_intersect() -> None:
    assert not segments_intersect((0, 0), (2, 0), (0, 1), (2, 1))
    assert intersection_point((0, 0), (2, 0), (0, 1), (2, 1)) is None


def test_collinear_overlap_intersects_without_point() -> None:
    p1, p2, q1, q2 = (0, 0), (2, 0), (1, 0), (3, 0)
    assert segments_intersect(p1, p2, q1, q2)
    assert intersection_point(p1, p2, q1, q2) is None


def test_collinear_separated_segments_do_not_intersect() -> None:
    assert not segments_intersect((0, 0), (1, 0), (2, 0), (3, 0))


def test_touching_endpoints_intersect() -> None:
    assert segments_intersect((0, 0), (1, 1), (1, 1), (2, 0))
    assert intersection_point((0, 0), (1, 1), (1, 1), (2, 0)) == (1.0, 1.0)


def test_point_is_not_clamped_to_segments() -> None:
    # T-junction: the query touches the reference interior with its endpoint
    assert segments_intersect((0, 0), (4, 0), (2, 0), (2, 5))
    assert intersection_point((0, 0), (4, 0), (2, 0), (2, 5)) == (2.0, 0.0)
    # lines cross at (10, 0) far outside both segments
    assert intersection_point((0, 0), (1, 0), (10, 1), (10, 2)) == (10.0, 0.0)


# --- engine

def test_end_to_end_anti_diagonal() -> None:
    out = find_intersections(_query([0, 2], [2, 0]), [_line("A", [0, 0], [2, 2])])
    assert [r.to_wire() for r in out] == [{"lineID": "A", "intersection": (1.0, 1.0)}]


def test_segment_against_itself_is_reported() -> None:
    out = find_intersections(_query([0, 0], [3, 1]), [_line("S", [0, 0], [3, 1])])
    assert len(out) == 1
    assert out[0].line_id == "S"
    assert out[0].intersection is None


def test_short_polylines_yield_nothing() -> None:
    lines = [_line("A", [0, 0], [2, 2])]
    assert find_intersections(_query([0, 0]), lines) == []
    assert find_intersections(_query(), lines) == []


def test_empty_reference_set_yields_nothing() -> None:
    assert find_intersections(_query([0, 0], [1, 1]), []) == []


def test_output_order_is_reference_then_query_segment() -> None:
    lines = [
        _line("V", [1, -1], [1, 3]),
        _line("D", [3, 1], [1, 1]),
    ]
    query = _query([0, 0], [2, 0], [2, 2], [0, 2])
    out = find_intersections(query, lines)
    assert [(r.line_id, r.intersection) for r in out] == [
        ("V", (1.0, 0.0)),
        ("V", (1.0, 2.0)),
        ("D", (2.0, 1.0)),
    ]


def test_duplicate_ids_are_independent() -> None:
    lines = [_line("X", [0, 0], [2, 2]), _line("X", [0, 1], [2, 1])]
    out = find_intersections(_query([1, 0], [1, 2]), lines)
    assert [(r.line_id, r.intersection) for r in out] == [("X", (1.0, 1.0)), ("X", (1.0, 1.0))]


def test_degenerate_reference_on_query_is_reported_without_point() -> None:
    out = find_intersections(_query([0, 0], [2, 2]), [_line("P", [1, 1], [1, 1])])
    assert [(r.line_id, r.intersection) for r in out] == [("P", None)]


# --- models

@pytest.mark.parametrize(
    "coords",
    [
        [[0, 0], [1]],
        [[0, 0], [1, 2, 3]],
        [[0, 0], ["1", 2]],
        [[0, 0], [True, 2]],
        [[0, 0], None],
        [[0, 0], [float("inf"), 1]],
        [[0, 0], [1, float("nan")]],
        "not-a-list",
    ],
)
def test_linestring_rejects_bad_coordinates(coords) -> None:
    with pytest.raises(ValueError):
        LineString.model_validate({"type": "LineString", "coordinates": coords})


def test_linestring_defaults() -> None:
    ls = LineString.model_validate({})
    assert ls.type == "LineString"
    assert ls.coordinates == []
    ls = LineString.model_validate({"type": "Anything", "coordinates": [[1, 2.5]]})
    assert ls.coordinates == [(1.0, 2.5)]
    assert LineString.model_validate({"coordinates": None}).coordinates == []
    # integers never overflow the finiteness check
    assert LineString.model_validate({"coordinates": [[10**20, 0]]}).coordinates == [(1e20, 0.0)]


# --- reference set loader

def test_load_preserves_order(tmp_path: Path) -> None:
    p = _write(
        tmp_path,
        [
            {"id": "b", "startPoint": [0, 0], "endPoint": [1, 1]},
            {"id": "a", "startPoint": [2, 2], "endPoint": [3, 3.5], "note": "ignored"},
        ],
    )
    lines = load_scattered_lines(p)
    assert [ln.id for ln in lines] == ["b", "a"]
    assert lines[1].end_point == (3.0, 3.5)


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(NotFound):
        load_scattered_lines(tmp_path / "nope.json")


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        '[{"id": "a", "startPoint": [NaN, 0], "endPoint": [1, 1]}]',
        '[{"id": "a", "startPoint": [0, 0], "endPoint": [1e400, 1]}]',
        {"id": "a", "startPoint": [0, 0], "endPoint": [1, 1]},
        [{"id": "a", "startPoint": [0, 0]}],
        [{"startPoint": [0, 0], "endPoint": [1, 1]}],
        [{"id": "a", "startPoint": [0, 0], "endPoint": [1]}],
        [{"id": 7, "startPoint": [0, 0], "endPoint": [1, 1]}],
    ],
)
def test_load_malformed(tmp_path: Path, payload) -> None:
    with pytest.raises(MalformedData):
        load_scattered_lines(_write(tmp_path, payload))


def test_load_errors_share_base() -> None:
    assert issubclass(NotFound, LoadError)
    assert issubclass(MalformedData, LoadError)


def test_packaged_reference_set_loads() -> None:
    lines = load_scattered_lines(default_reference_path())
    assert [ln.id for ln in lines] == ["A", "B", "C", "D", "E"]


# --- settings / logging

def test_service_settings_defaults_and_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    s = service_settings()
    assert s.port == DEFAULT_PORT
    assert s.auth_token == "Authorization"
    assert s.reference_path == default_reference_path()

    (tmp_path / "LineCross" / "settings.json").write_text(json.dumps({"port": 9000, "auth_token": "t"}), encoding="utf-8")
    s = service_settings({"port": None, "reference_path": str(tmp_path / "lines.json")})
    assert s.port == 9000
    assert s.auth_token == "t"
    assert s.reference_path == tmp_path / "lines.json"


def test_service_settings_invalid(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    with pytest.raises(ValueError):
        service_settings({"port": 70000})


def test_unreadable_settings_file_is_ignored(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    settings_path().write_text("{broken", encoding="utf-8")
    assert load_settings() == {}


def test_configure_logging_writes_log_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    try:
        configure_logging("DEBUG")
        logger.info("hello from test")
        logger.complete()
        assert (tmp_path / "LineCross" / "logs" / "linecross.log").exists()
    finally:
        logger.remove()
        logger.add(sys.stderr)


def test_static_token_check() -> None:
    check = StaticTokenCheck()
    assert check.header == "Authorization"
    assert check.is_authorized("Authorization")
    assert not check.is_authorized(None)
    assert not check.is_authorized("authorization")
