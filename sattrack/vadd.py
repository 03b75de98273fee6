"""Apply a velocity change to catalogued orbits and write new elements."""

from __future__ import annotations

import dataclasses
import getopt
import math
import os
import re
import sys
from collections.abc import Iterable

from sattrack.astro import modulo, nfd2mjd, nfd_now
from sattrack.kepler import AE, XKMPER, XMNPDA, SGDP4Error, Vector
from sattrack.sgdp4 import SGDP4
from sattrack.tle import Orbit, iter_twoline

XKE = 0.07436680
"""Gravitational constant in Earth radii and minutes."""

_VEL_UNIT = XKE * XKMPER / AE * XMNPDA / 86400.0

_USAGE = (
    "propagate c:i:t:m:\n\nPropagates orbital elements to a new epoch using the "
    "SGP4/SDP4 model.\nDefault operation propagates classfd.tle to now,\n\n"
    "-c  input catalog\n-i  Satellite number\n-t  New epoch (YYYY-MM-DDTHH:MM:SS)\n"
    "-m  New epoch (MJD)\n"
)


def _atof(text: str) -> float:
    match = re.match(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", text)
    return float(match.group(1)) if match else 0.0


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _dot(a: Iterable[float], b: Iterable[float]) -> float:
    return sum(x * y for x, y in zip(a, b))


def _norm(a: Vector) -> float:
    return math.sqrt(_dot(a, a))


def _cross(a: Vector, b: Vector) -> Vector:
    return Vector(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


def _acos(x: float) -> float:
    return math.acos(max(-1.0, min(1.0, x)))


def _mjd2date(mjd: float) -> tuple[int, int, float]:
    jd = mjd + 2400000.5 + 0.5
    z = math.floor(jd)
    f = math.fmod(jd, 1.0)
    if z < 2299161:
        a = z
    else:
        alpha = math.floor((z - 1867216.25) / 36524.25)
        a = z + 1 + alpha - math.floor(alpha / 4.0)
    b = a + 1524
    c = math.floor((b - 122.1) / 365.25)
    d = math.floor(365.25 * c)
    e = math.floor((b - d) / 30.6001)
    day = b - d - math.floor(30.6001 * e) + f
    month = e - 1 if e < 14 else e - 13
    year = c - 4716 if month > 2 else c - 4715
    return year, month, day


def mjd2doy(mjd: float) -> tuple[int, float]:
    """Year and fractional day of year of a Modified Julian Date."""
    year, month, day = _mjd2date(mjd)
    k = 1 if year % 4 == 0 and year % 400 != 0 else 2
    doy = math.floor(275.0 * month / 9.0) - k * math.floor((month + 9.0) / 12.0) + day - 30
    return year, doy


def classel(ep_year: int, ep_day: float, r: Vector, v: Vector) -> Orbit:
    """Classical elements of an elliptic orbit from position (km) and velocity (km/s).

    Raises ValueError when the state is not on an elliptic orbit.
    """
    mu = 1.0
    r = Vector(*(c / XKMPER for c in r))
    v = Vector(*(c / _VEL_UNIT for c in v))

    rm = _norm(r)
    vm2 = _dot(v, v)
    rvm = _dot(r, v)
    h = _cross(r, v)
    chi = _dot(h, h) / mu

    scale = vm2 / mu - 1.0 / rm
    e = Vector(*(scale * rc - rvm / mu * vc for rc, vc in zip(r, v)))

    a = 1.0 / (2.0 / rm - vm2 / mu)
    ecc = _norm(e)
    incl = math.degrees(_acos(h.z / _norm(h)))

    nn = _cross(Vector(0.0, 0.0, 1.0), h)
    if nn.x == 0.0 and nn.y == 0.0:
        nn.x = 1.0
    node = math.degrees(math.atan2(nn.y, nn.x))
    if node < 0.0:
        node += 360.0

    peri = math.degrees(_acos(_dot(nn, e) / (_norm(nn) * ecc)))
    if e.z < 0.0:
        peri = 360.0 - peri
    if peri < 0.0:
        peri += 360.0

    if ecc >= 1.0 or a <= 0.0:
        raise ValueError(f"state is not on an elliptic orbit (e = {ecc:g})")
    xp = (chi - rm) / ecc
    yp = rvm / ecc * math.sqrt(chi / mu)
    b = a * math.sqrt(1.0 - ecc * ecc)
    cx = xp / a + ecc
    sx = yp / b
    ee = math.atan2(sx, cx)
    mm = math.degrees(ee - ecc * sx)
    if mm < 0.0:
        mm += 360.0

    return Orbit(
        satno=0,
        ep_year=ep_year,
        ep_day=ep_day,
        rev=XKE * a ** -1.5 * XMNPDA / (2.0 * math.pi),
        bstar=0.0,
        eqinc=math.radians(incl),
        ecc=ecc,
        mnan=math.radians(mm),
        argp=math.radians(peri),
        ascn=math.radians(node),
        norb=0,
    )


def rv2el(satno: int, mjd: float, r0: Vector, v0: Vector) -> Orbit:
    """Mean elements at mjd whose propagated state reproduces r0, v0.

    The classical elements are corrected four times by the difference
    between the target state and the propagated one.
    """
    ep_year, ep_day = mjd2doy(mjd)
    first = dataclasses.replace(classel(ep_year, ep_day, r0, v0), satno=satno)
    orb = first
    for _ in range(4):
        r, v = SGDP4(orb).position(mjd + 2400000.5, True)
        got = classel(ep_year, ep_day, r, v)
        orb = Orbit(
            satno=orb.satno,
            ep_year=orb.ep_year,
            ep_day=orb.ep_day,
            rev=orb.rev + first.rev - got.rev,
            bstar=orb.bstar,
            eqinc=max(0.0, orb.eqinc + first.eqinc - got.eqinc),
            ecc=max(0.0, orb.ecc + first.ecc - got.ecc),
            mnan=orb.mnan + first.mnan - got.mnan,
            argp=orb.argp + first.argp - got.argp,
            ascn=orb.ascn + first.ascn - got.ascn,
            norb=orb.norb,
        )
    twopi = 2.0 * math.pi
    return dataclasses.replace(
        orb,
        mnan=modulo(orb.mnan, twopi),
        ascn=modulo(orb.ascn, twopi),
        argp=modulo(orb.argp, twopi),
    )


def tle_checksum(line: str) -> int:
    """Modulo-10 checksum: digits count their value, minus signs count one."""
    total = sum(int(ch) if ch.isdigit() else 1 for ch in line if ch.isdigit() or ch == "-")
    return total % 10


def format_tle(orb: Orbit) -> tuple[str, str]:
    """Two-line element lines, checksums included, for an orbit."""
    sbstar = " 00000-0"
    if abs(orb.bstar) > 1e-9:
        text = f"{10 * orb.bstar:11.4e}"
        sbstar = text[0] + text[1] + text[3:7] + text[8] + text[10]
    line1 = (
        f"1 {orb.satno:05d}U {orb.desig:<8s} {orb.ep_year - 2000:2d}{orb.ep_day:012.8f}"
        f"  .00000000  00000-0 {sbstar:>8s} 0    0"
    )
    line2 = (
        f"2 {orb.satno:05d} {math.degrees(orb.eqinc):8.4f} {math.degrees(orb.ascn):8.4f} "
        f"{1e7 * orb.ecc:07.0f} {math.degrees(orb.argp):8.4f} "
        f"{math.degrees(orb.mnan):8.4f} {orb.rev:11.8f}    0"
    )
    return line1 + str(tle_checksum(line1)), line2 + str(tle_checksum(line2))


def velocity_kick(r: Vector, v: Vector, vadd: float, direction: str) -> Vector:
    """Velocity (km/s) after adding vadd m/s along the prograde, radial or
    orbit-normal direction; any other direction leaves it unchanged."""
    if direction == "prograde":
        axis = v
    elif direction == "radial":
        axis = r
    elif direction == "normal":
        axis = _cross(r, v)
    else:
        return Vector(v.x, v.y, v.z)
    size = _norm(axis)
    return Vector(*(vc + vadd * ac / size / 1000.0 for vc, ac in zip(v, axis)))


def main(argv: list[str] | None = None) -> int:
    """Command line: apply a velocity change and print the new elements."""
    args = sys.argv[1:] if argv is None else list(argv)
    tlefile = os.path.join(os.environ.get("ST_TLEDIR", ""), "classfd.tle")
    mjd = nfd2mjd(nfd_now())

    try:
        options, _ = getopt.getopt(args, "c:i:t:m:hv:d:I:")
    except getopt.GetoptError:
        print(_USAGE, end="")
        return 0

    satno = 0
    satnonew = -1
    vadd = 0.0
    direction = "radial"
    for option, value in options:
        if option == "-t":
            try:
                mjd = nfd2mjd(value)
            except ValueError as exc:
                print(f"vadd: {exc}", file=sys.stderr)
                return 1
        elif option == "-m":
            mjd = _atof(value)
        elif option == "-c":
            tlefile = value
        elif option == "-i":
            satno = _atoi(value)
        elif option == "-v":
            vadd = _atof(value)
        elif option == "-d":
            direction = value
        elif option == "-I":
            satnonew = _atoi(value)
        else:
            print(_USAGE, end="")
            return 0

    try:
        handle = open(tlefile, encoding="utf-8", errors="replace")
    except OSError as exc:
        print(f"vadd: cannot open {tlefile}: {exc}", file=sys.stderr)
        return 1

    with handle:
        for orb in iter_twoline(handle, satno):
            try:
                r, v = SGDP4(orb).position(mjd + 2400000.5, True)
                v = velocity_kick(r, v, vadd, direction)
                new = rv2el(orb.satno, mjd, r, v)
            except (SGDP4Error, ValueError, ZeroDivisionError) as exc:
                print(f"vadd: {exc}", file=sys.stderr)
                continue
            if satnonew == -1:
                new.desig = orb.desig
            else:
                new.desig = "15999A"
                new.satno = satnonew
            line1, line2 = format_tle(new)
            print(f"{line1}\n{line2}\n# {satno:05d} + {vadd:g} m/s {direction}")
    return 0