from __future__ import annotations

from typing import List, Sequence

from .analysis.geometry import intersection_point, polyline_segments, segments_intersect
from .models import Intersection, LineString, ScatteredLine


def find_intersections(linestring: LineString, scattered_lines: Sequence[ScatteredLine]) -> List[Intersection]:
    """
    All-pairs scan of reference segments against the polyline's segments.

    Output order is reference order first, then query-segment order. A pair
    flagged as crossing always yields a result, even when the lines are
    parallel and no point can be computed.
    """
    segments = polyline_segments(linestring.coordinates)
    out: List[Intersection] = []

    for line in scattered_lines:
        p1, p2 = line.start_point, line.end_point
        for q1, q2 in segments:
            if segments_intersect(p1, p2, q1, q2):
                out.append(Intersection(line_id=line.id, intersection=intersection_point(p1, p2, q1, q2)))

    return out
