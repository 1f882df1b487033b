"""Decoding of PHIVOLCS intensity codes (PEIS roman numerals)."""

from __future__ import annotations

from typing import Iterable, Optional

from quake_aggregator.errors import UnrecognizedIntensityError

INTENSITY_SCALE = {
    "i": 1,
    "ii": 2,
    "iii": 3,
    "iv": 4,
    "v": 5,
    "vi": 6,
    "vii": 7,
    "viii": 8,
    "ix": 9,
    "x": 10,
}


def decode(code: str) -> int:
    """Map an intensity code such as ``"VII"`` to its numeric value.

    Raises ``UnrecognizedIntensityError`` for anything outside I..X.
    """
    value = INTENSITY_SCALE.get(code.lower()) if isinstance(code, str) else None
    if value is None:
        raise UnrecognizedIntensityError(code)
    return value


def highest(codes: Iterable[str]) -> Optional[int]:
    """Decode every code and return the maximum; one bad code fails the whole set."""
    values = [decode(code) for code in codes]
    return max(values) if values else None
