"""Keplerian state produced by the orbital model and its Cartesian form."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum

XKMPER = 6378.135
"""Kilometres per Earth radius."""
XMNPDA = 1440.0
"""Minutes per day."""
AE = 1.0
"""Earth radius in model units."""


class Mode(IntEnum):
    """Orbital model selected when elements are initialised."""

    ERROR = -1
    NOT_INIT = 0
    ZERO_ECC = 1
    NEAR_SIMP = 2
    NEAR_NORM = 3
    DEEP_NORM = 4
    DEEP_RESN = 5
    DEEP_SYNC = 6


class SGDP4Error(Exception):
    """Raised when elements cannot be initialised or propagated."""


@dataclass
class Vector:
    """A Cartesian vector (km or km/s)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z


@dataclass
class Kepler:
    """Osculating state: radius and semi-major axis in km, angles in radians,
    radial and transverse velocities in km/s."""

    radius: float = 0.0
    theta: float = 0.0
    eqinc: float = 0.0
    ascn: float = 0.0
    argp: float = 0.0
    smjaxs: float = 0.0
    rdotk: float = 0.0
    rfdotk: float = 0.0
    ecc: float = 0.0


def kep2xyz(kep: Kepler) -> tuple[Vector, Vector]:
    """Return the position and velocity vectors of a Keplerian state."""
    sin_t, cos_t = math.sin(kep.theta), math.cos(kep.theta)
    sin_i, cos_i = math.sin(kep.eqinc), math.cos(kep.eqinc)
    sin_s, cos_s = math.sin(kep.ascn), math.cos(kep.ascn)

    xmx = -sin_s * cos_i
    xmy = cos_s * cos_i

    ux = xmx * sin_t + cos_s * cos_t
    uy = xmy * sin_t + sin_s * cos_t
    uz = sin_i * sin_t

    vx = xmx * cos_t - cos_s * sin_t
    vy = xmy * cos_t - sin_s * sin_t
    vz = sin_i * cos_t

    pos = Vector(kep.radius * ux, kep.radius * uy, kep.radius * uz)
    vel = Vector(
        kep.rdotk * ux + kep.rfdotk * vx,
        kep.rdotk * uy + kep.rfdotk * vy,
        kep.rdotk * uz + kep.rfdotk * vz,
    )
    return pos, vel