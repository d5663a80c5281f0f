from __future__ import annotations

import math
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from .analysis.geometry import Point


def _check_pair(value: Any) -> Any:
    # JSON arrays only; bools are ints to Python but not numbers on the wire
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError("coordinate must be an [x, y] pair")
    for v in value:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("coordinate values must be numbers")
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("coordinate values must be finite")
    return value


def _null_as_empty(value: Any) -> Any:
    return [] if value is None else value


Coordinate = Annotated[Point, BeforeValidator(_check_pair)]


class LineString(BaseModel):
    """GeoJSON-LineString-shaped query polyline. `type` is carried but not checked."""

    type: str = Field("LineString", description="Geometry type label.")
    coordinates: Annotated[List[Coordinate], BeforeValidator(_null_as_empty)] = Field(
        default_factory=list, description="Ordered polyline vertices; null reads as empty."
    )


class ScatteredLine(BaseModel):
    """One labeled reference segment."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    start_point: Coordinate = Field(..., alias="startPoint")
    end_point: Coordinate = Field(..., alias="endPoint")


class Intersection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    line_id: str = Field(..., alias="lineID")
    intersection: Optional[Point] = Field(None, description="Crossing point, or None for parallel lines.")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
