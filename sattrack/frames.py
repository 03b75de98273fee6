"""Rotation between the ICRS/J2000 frame and the TEME frame of the orbital model."""

from __future__ import annotations

import getopt
import math
import os
import re
import sys
from collections.abc import Sequence

from sattrack.astro import MJD_J2000, modulo, nfd2mjd, nfd_now
from sattrack.kepler import SGDP4Error
from sattrack.sgdp4 import SGDP4
from sattrack.tle import iter_twoline

D2R = math.pi / 180.0

Matrix = list[list[float]]

# IAU 1980 nutation series:
# (nm1, nm, nf, nd, nn, sin coeff, sin rate, cos coeff, cos rate), 0.0001 arcsec
_NUTATION = (
    (0, 0, 0, 0, 1, -171996.0, -174.2, 92025.0, 8.9),
    (0, 0, 0, 0, 2, 2062.0, 0.2, -895.0, 0.5),
    (-2, 0, 2, 0, 1, 46.0, 0.0, -24.0, 0.0),
    (2, 0, -2, 0, 0, 11.0, 0.0, 0.0, 0.0),
    (-2, 0, 2, 0, 2, -3.0, 0.0, 1.0, 0.0),
    (1, -1, 0, -1, 0, -3.0, 0.0, 0.0, 0.0),
    (0, -2, 2, -2, 1, -2.0, 0.0, 1.0, 0.0),
    (2, 0, -2, 0, 1, 1.0, 0.0, 0.0, 0.0),
    (0, 0, 2, -2, 2, -13187.0, -1.6, 5736.0, -3.1),
    (0, 1, 0, 0, 0, 1426.0, -3.4, 54.0, -0.1),
    (0, 1, 2, -2, 2, -517.0, 1.2, 224.0, -0.6),
    (0, -1, 2, -2, 2, 217.0, -0.5, -95.0, 0.3),
    (0, 0, 2, -2, 1, 129.0, 0.1, -70.0, 0.0),
    (2, 0, 0, -2, 0, 48.0, 0.0, 1.0, 0.0),
    (0, 0, 2, -2, 0, -22.0, 0.0, 0.0, 0.0),
    (0, 2, 0, 0, 0, 17.0, -0.1, 0.0, 0.0),
    (0, 1, 0, 0, 1, -15.0, 0.0, 9.0, 0.0),
    (0, 2, 2, -2, 2, -16.0, 0.1, 7.0, 0.0),
    (0, -1, 0, 0, 1, -12.0, 0.0, 6.0, 0.0),
    (-2, 0, 0, 2, 1, -6.0, 0.0, 3.0, 0.0),
    (0, -1, 2, -2, 1, -5.0, 0.0, 3.0, 0.0),
    (2, 0, 0, -2, 1, 4.0, 0.0, -2.0, 0.0),
    (0, 1, 2, -2, 1, 4.0, 0.0, -2.0, 0.0),
    (1, 0, 0, -1, 0, -4.0, 0.0, 0.0, 0.0),
    (2, 1, 0, -2, 0, 1.0, 0.0, 0.0, 0.0),
    (0, 0, -2, 2, 1, 1.0, 0.0, 0.0, 0.0),
    (0, 1, -2, 2, 0, -1.0, 0.0, 0.0, 0.0),
    (0, 1, 0, 0, 2, 1.0, 0.0, 0.0, 0.0),
    (-1, 0, 0, 1, 1, 1.0, 0.0, 0.0, 0.0),
    (0, 1, 2, -2, 0, -1.0, 0.0, 0.0, 0.0),
    (0, 0, 2, 0, 2, -2274.0, -0.2, 977.0, -0.5),
    (1, 0, 0, 0, 0, 712.0, 0.1, -7.0, 0.0),
    (0, 0, 2, 0, 1, -386.0, -0.4, 200.0, 0.0),
    (1, 0, 2, 0, 2, -301.0, 0.0, 129.0, -0.1),
    (1, 0, 0, -2, 0, -158.0, 0.0, -1.0, 0.0),
    (-1, 0, 2, 0, 2, 123.0, 0.0, -53.0, 0.0),
    (0, 0, 0, 2, 0, 63.0, 0.0, -2.0, 0.0),
    (1, 0, 0, 0, 1, 63.0, 0.1, -33.0, 0.0),
    (-1, 0, 0, 0, 1, -58.0, -0.1, 32.0, 0.0),
    (-1, 0, 2, 2, 2, -59.0, 0.0, 26.0, 0.0),
    (1, 0, 2, 0, 1, -51.0, 0.0, 27.0, 0.0),
    (0, 0, 2, 2, 2, -38.0, 0.0, 16.0, 0.0),
    (2, 0, 0, 0, 0, 29.0, 0.0, -1.0, 0.0),
    (1, 0, 2, -2, 2, 29.0, 0.0, -12.0, 0.0),
    (2, 0, 2, 0, 2, -31.0, 0.0, 13.0, 0.0),
    (0, 0, 2, 0, 0, 26.0, 0.0, -1.0, 0.0),
    (-1, 0, 2, 0, 1, 21.0, 0.0, -10.0, 0.0),
    (-1, 0, 0, 2, 1, 16.0, 0.0, -8.0, 0.0),
    (1, 0, 0, -2, 1, -13.0, 0.0, 7.0, 0.0),
    (-1, 0, 2, 2, 1, -10.0, 0.0, 5.0, 0.0),
    (1, 1, 0, -2, 0, -7.0, 0.0, 0.0, 0.0),
    (0, 1, 2, 0, 2, 7.0, 0.0, -3.0, 0.0),
    (0, -1, 2, 0, 2, -7.0, 0.0, 3.0, 0.0),
    (1, 0, 2, 2, 2, -8.0, 0.0, 3.0, 0.0),
    (1, 0, 0, 2, 0, 6.0, 0.0, 0.0, 0.0),
    (2, 0, 2, -2, 2, 6.0, 0.0, -3.0, 0.0),
    (0, 0, 0, 2, 1, -6.0, 0.0, 3.0, 0.0),
    (0, 0, 2, 2, 1, -7.0, 0.0, 3.0, 0.0),
    (1, 0, 2, -2, 1, 6.0, 0.0, -3.0, 0.0),
    (0, 0, 0, -2, 1, -5.0, 0.0, 3.0, 0.0),
    (1, -1, 0, 0, 0, 5.0, 0.0, 0.0, 0.0),
    (2, 0, 2, 0, 1, -5.0, 0.0, 3.0, 0.0),
    (0, 1, 0, -2, 0, -4.0, 0.0, 0.0, 0.0),
    (1, 0, -2, 0, 0, 4.0, 0.0, 0.0, 0.0),
    (0, 0, 0, 1, 0, -4.0, 0.0, 0.0, 0.0),
    (1, 1, 0, 0, 0, -3.0, 0.0, 0.0, 0.0),
    (1, 0, 2, 0, 0, 3.0, 0.0, 0.0, 0.0),
    (1, -1, 2, 0, 2, -3.0, 0.0, 1.0, 0.0),
    (-1, -1, 2, 2, 2, -3.0, 0.0, 1.0, 0.0),
    (-2, 0, 0, 0, 1, -2.0, 0.0, 1.0, 0.0),
    (3, 0, 2, 0, 2, -3.0, 0.0, 1.0, 0.0),
    (0, -1, 2, 2, 2, -3.0, 0.0, 1.0, 0.0),
    (1, 1, 2, 0, 2, 2.0, 0.0, -1.0, 0.0),
    (-1, 0, 2, -2, 1, -2.0, 0.0, 1.0, 0.0),
    (2, 0, 0, 0, 1, 2.0, 0.0, -1.0, 0.0),
    (1, 0, 0, 0, 2, -2.0, 0.0, 1.0, 0.0),
    (3, 0, 0, 0, 0, 2.0, 0.0, 0.0, 0.0),
    (0, 0, 2, 1, 2, 2.0, 0.0, -1.0, 0.0),
    (-1, 0, 0, 0, 2, 1.0, 0.0, -1.0, 0.0),
    (1, 0, 0, -4, 0, -1.0, 0.0, 0.0, 0.0),
    (-2, 0, 2, 2, 2, 1.0, 0.0, -1.0, 0.0),
    (-1, 0, 2, 4, 2, -2.0, 0.0, 1.0, 0.0),
    (2, 0, 0, -4, 0, -1.0, 0.0, 0.0, 0.0),
    (1, 1, 2, -2, 2, 1.0, 0.0, -1.0, 0.0),
    (1, 0, 2, 2, 1, -1.0, 0.0, 1.0, 0.0),
    (-2, 0, 2, 4, 2, -1.0, 0.0, 1.0, 0.0),
    (-1, 0, 4, 0, 2, 1.0, 0.0, 0.0, 0.0),
    (1, -1, 0, -2, 0, 1.0, 0.0, 0.0, 0.0),
    (2, 0, 2, -2, 1, 1.0, 0.0, -1.0, 0.0),
    (2, 0, 2, 2, 2, -1.0, 0.0, 0.0, 0.0),
    (1, 0, 0, 2, 1, -1.0, 0.0, 0.0, 0.0),
    (0, 0, 4, -2, 2, 1.0, 0.0, 0.0, 0.0),
    (3, 0, 2, -2, 2, 1.0, 0.0, 0.0, 0.0),
    (1, 0, 2, -2, 0, -1.0, 0.0, 0.0, 0.0),
    (0, 1, 2, 0, 1, 1.0, 0.0, 0.0, 0.0),
    (-1, -1, 0, 2, 1, 1.0, 0.0, 0.0, 0.0),
    (0, 0, -2, 0, 1, -1.0, 0.0, 0.0, 0.0),
    (0, 0, 2, -1, 2, -1.0, 0.0, 0.0, 0.0),
    (0, 1, 0, 2, 0, -1.0, 0.0, 0.0, 0.0),
    (1, 0, -2, -2, 0, -1.0, 0.0, 0.0, 0.0),
    (0, -1, 2, 0, 1, -1.0, 0.0, 0.0, 0.0),
    (1, 1, 0, -2, 1, -1.0, 0.0, 0.0, 0.0),
    (1, 0, -2, 2, 0, -1.0, 0.0, 0.0, 0.0),
    (2, 0, 0, 2, 0, 1.0, 0.0, 0.0, 0.0),
    (0, 0, 2, 4, 2, -1.0, 0.0, 0.0, 0.0),
    (0, 1, 0, 1, 0, 1.0, 0.0, 0.0, 0.0),
)

_USAGE = (
    "tle2rv c:i:t:m:efh\n\n"
    "-c   Catalog to load [classfd.tle]\n"
    "-i   Object to convert [all]\n"
    "-t   Epoch (YYYY-mm-ddThh:mm:ss)\n"
    "-m   Epoch (MJD)\n"
    "-e   Use TLE epoch\n"
    "-j   J2000 output\n"
    "-g   GMAT output (J2000)\n"
    "-h   This help\n"
)


def _atof(text: str) -> float:
    match = re.match(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", text)
    return float(match.group(1)) if match else 0.0


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def nutation(mjd: float) -> tuple[float, float, float]:
    """Nutation in longitude and obliquity and the mean obliquity, in radians."""
    t = (mjd - MJD_J2000) / 36525.0
    t2 = t * t
    t3 = t2 * t

    d = modulo(297.85036 + 445267.111480 * t - 0.0019142 * t2 + t3 / 189474.0, 360.0) * D2R
    m = modulo(357.52772 + 35999.050340 * t - 0.0001603 * t2 - t3 / 300000.0, 360.0) * D2R
    m1 = modulo(134.96298 + 477198.867398 * t + 0.0086972 * t2 + t3 / 56250.0, 360.0) * D2R
    f = modulo(93.27191 + 483202.017538 * t - 0.0036825 * t2 + t3 / 327270.0, 360.0) * D2R
    n = modulo(125.04452 - 1934.136261 * t + 0.0020708 * t2 + t3 / 450000.0, 360.0) * D2R

    dpsi = deps = 0.0
    for nm1, nm, nf, nd, nn, s, st, c, ct in _NUTATION:
        arg = nd * d + nm * m + nm1 * m1 + nf * f + nn * n
        dpsi += (s + st * t) * math.sin(arg)
        deps += (c + ct * t) * math.cos(arg)
    dpsi *= 0.0001 / 3600 * D2R
    deps *= 0.0001 / 3600 * D2R
    eps = (23.4392911 + (-46.8150 * t - 0.00059 * t2 + 0.001813 * t3) / 3600.0) * D2R
    return dpsi, deps, eps


def precession_angles(mjd0: float, mjd: float) -> tuple[float, float, float]:
    """Precession angles zeta, z and theta (radians) from epoch mjd0 to mjd."""
    t0 = (mjd0 - MJD_J2000) / 36525.0
    t = (mjd - mjd0) / 36525.0
    base = 2306.2181 + 1.39656 * t0 - 0.000139 * t0 * t0
    zeta = base * t + (0.30188 - 0.000344 * t0) * t * t + 0.017998 * t ** 3
    z = base * t + (1.09468 + 0.000066 * t0) * t * t + 0.018203 * t ** 3
    theta = (
        (2004.3109 - 0.85330 * t0 - 0.000217 * t0 * t0) * t
        - (0.42665 + 0.000217 * t0) * t * t
        - 0.041833 * t ** 3
    )
    scale = D2R / 3600.0
    return zeta * scale, z * scale, theta * scale


def identity_matrix() -> Matrix:
    """The 3x3 identity matrix."""
    return [[1.0 if i == j else 0.0 for j in range(3)] for i in range(3)]


def matrix_multiply(a: Sequence[Sequence[float]], b: Sequence[Sequence[float]]) -> Matrix:
    """Product of two 3x3 matrices."""
    columns = list(zip(*b))
    return [[sum(x * y for x, y in zip(row, col)) for col in columns] for row in a]


def matrix_transpose(a: Sequence[Sequence[float]]) -> Matrix:
    """Transpose of a 3x3 matrix."""
    return [list(col) for col in zip(*a)]


def vector_multiply(a: Sequence[Sequence[float]], b: Sequence[float]) -> list[float]:
    """Product of a 3x3 matrix and a 3-vector."""
    return [sum(x * y for x, y in zip(row, b)) for row in a]


def rotate_x(phi: float, a: Sequence[Sequence[float]]) -> Matrix:
    """Frame rotation about the x-axis by phi radians applied to a."""
    s, c = math.sin(phi), math.cos(phi)
    return matrix_multiply([[1.0, 0.0, 0.0], [0.0, c, s], [0.0, -s, c]], a)


def rotate_y(phi: float, a: Sequence[Sequence[float]]) -> Matrix:
    """Frame rotation about the y-axis by phi radians applied to a."""
    s, c = math.sin(phi), math.cos(phi)
    return matrix_multiply([[c, 0.0, -s], [0.0, 1.0, 0.0], [s, 0.0, c]], a)


def rotate_z(phi: float, a: Sequence[Sequence[float]]) -> Matrix:
    """Frame rotation about the z-axis by phi radians applied to a."""
    s, c = math.sin(phi), math.cos(phi)
    return matrix_multiply([[c, s, 0.0], [-s, c, 0.0], [0.0, 0.0, 1.0]], a)


def dot_product(a: Sequence[float], b: Sequence[float]) -> float:
    """Scalar product of two 3-vectors."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def magnitude(a: Sequence[float]) -> float:
    """Euclidean length of a 3-vector."""
    return math.sqrt(dot_product(a, a))


def cross_product(a: Sequence[float], b: Sequence[float]) -> list[float]:
    """Vector product of two 3-vectors."""
    return [
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    ]


def icrs_to_teme(mjd: float) -> Matrix:
    """Rotation matrix taking J2000 vectors to TEME at the given date."""
    zeta, z, theta = precession_angles(MJD_J2000, mjd)
    p = rotate_z(-z, rotate_y(theta, rotate_z(-zeta, identity_matrix())))

    dpsi, deps, eps = nutation(mjd)
    n = rotate_x(-eps - deps, rotate_z(-dpsi, rotate_x(eps, identity_matrix())))

    q = rotate_z(dpsi * math.cos(eps + deps), identity_matrix())
    return matrix_multiply(matrix_multiply(q, n), p)


def main(argv: list[str] | None = None) -> int:
    """Command line: print TEME or J2000 state vectors for a TLE catalog."""
    args = sys.argv[1:] if argv is None else list(argv)
    tlefile = os.path.join(os.environ.get("ST_TLEDIR", ""), "classfd.tle")
    mjd = nfd2mjd(nfd_now())

    try:
        options, _ = getopt.getopt(args, "c:i:t:m:hejg")
    except getopt.GetoptError:
        print(_USAGE, end="")
        return 0

    satno = 0
    useepoch = j2000 = gmat = False
    for option, value in options:
        if option == "-t":
            try:
                mjd = nfd2mjd(value)
            except ValueError as exc:
                print(f"tle2rv: {exc}", file=sys.stderr)
                return 1
        elif option == "-m":
            mjd = _atof(value)
        elif option == "-e":
            useepoch = True
        elif option == "-j":
            j2000 = True
        elif option == "-g":
            gmat = True
        elif option == "-c":
            tlefile = value
        elif option == "-i":
            satno = _atoi(value)
        else:
            print(_USAGE, end="")
            return 0

    try:
        handle = open(tlefile, encoding="utf-8", errors="replace")
    except OSError as exc:
        print(f"tle2rv: cannot open {tlefile}: {exc}", file=sys.stderr)
        return 1

    with handle:
        for orb in iter_twoline(handle, satno):
            try:
                model = SGDP4(orb)
                if useepoch:
                    mjd = model.jd0 - 2400000.5
                r, v = model.position(mjd + 2400000.5, True)
            except SGDP4Error as exc:
                print(f"tle2rv: {exc}", file=sys.stderr)
                continue

            if not j2000 and not gmat:
                print(
                    f"{orb.satno:05d} {mjd:14.8f} {r.x:f} {r.y:f} {r.z:f} "
                    f"{v.x:f} {v.y:f} {v.z:f} TEME"
                )

            et = matrix_transpose(icrs_to_teme(mjd))
            rr = vector_multiply(et, list(r))
            vv = vector_multiply(et, list(v))

            if j2000 and not gmat:
                print(
                    f"{orb.satno:05d} {mjd:14.8f} {rr[0]:f} {rr[1]:f} {rr[2]:f} "
                    f"{vv[0]:f} {vv[1]:f} {vv[2]:f} J2000"
                )
            if gmat:
                print(f"UTCModJulian = {mjd - 29999.5:14.8f}")
                print("CoordinateSystem = EarthMJ2000Eq")
                print(f"X = {rr[0]:f}")
                print(f"Y = {rr[1]:f}")
                print(f"Z = {rr[2]:f}")
                print(f"VX = {vv[0]:f}")
                print(f"VY = {vv[1]:f}")
                print(f"VZ = {vv[2]:f}")
    return 0