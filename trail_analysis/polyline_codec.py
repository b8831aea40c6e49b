"""Encoded polyline support at 1e-6 degree precision.

Coordinates are quantised to millionths of a degree and written as deltas
from the previous point, each delta packed into printable ASCII in 5-bit
chunks. This is the ``cmp6`` shape format accepted by the elevation service.
"""

from __future__ import annotations

import math
from typing import Iterable, List

from polyline import decode as polyline_decode

from .models import LatLon, RawPoint

PRECISION = 6
_FACTOR = 10**PRECISION
_ASCII_OFFSET = 63
_CHUNK_BITS = 5
_CHUNK_MASK = 0x1F
_CONTINUATION = 0x20


def encode_number(value: int) -> str:
    """Encode one signed integer delta."""

    num = value << 1
    if num < 0:
        num = ~num
    chunks = []
    while num >= _CONTINUATION:
        chunks.append(chr((_CONTINUATION | (num & _CHUNK_MASK)) + _ASCII_OFFSET))
        num >>= _CHUNK_BITS
    chunks.append(chr(num + _ASCII_OFFSET))
    return "".join(chunks)


def encode_coordinates(coordinates: Iterable[LatLon]) -> str:
    """Encode (lat, lon) pairs into a polyline string."""

    previous_lat = 0
    previous_lon = 0
    encoded: List[str] = []
    for lat, lon in coordinates:
        quantised_lat = _quantise(lat)
        quantised_lon = _quantise(lon)
        encoded.append(encode_number(quantised_lat - previous_lat))
        encoded.append(encode_number(quantised_lon - previous_lon))
        previous_lat = quantised_lat
        previous_lon = quantised_lon
    return "".join(encoded)


def encode_points(points: Iterable[RawPoint]) -> str:
    """Encode the coordinates of GPS points, in iteration order."""

    return encode_coordinates(point.latlon for point in points)


def decode_coordinates(encoded: str) -> List[LatLon]:
    """Decode a polyline string into a list of (lat, lon) tuples."""

    if not encoded:
        return []
    try:
        decoded = polyline_decode(encoded, PRECISION)
    except (ValueError, TypeError, IndexError) as exc:
        raise ValueError("Unable to decode polyline") from exc
    return [(float(lat), float(lon)) for lat, lon in decoded]


def _quantise(degrees: float) -> int:
    # Half-up rounding, not Python's round-half-even.
    return int(math.floor(degrees * _FACTOR + 0.5))


__all__ = [
    "PRECISION",
    "decode_coordinates",
    "encode_coordinates",
    "encode_number",
    "encode_points",
]
