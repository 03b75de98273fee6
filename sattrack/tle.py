"""Reading and reshaping NORAD two-line orbital elements."""

from __future__ import annotations

import getopt
import math
import re
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

_FLOAT_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_RE = re.compile(r"\s*([+-]?\d+)")
_USAGE = "-c <catalog>\n-r reverse\n"


@dataclass
class Orbit:
    """Orbital elements of one satellite; angles in radians."""

    satno: int = 0
    ep_year: int = 0
    ep_day: float = 0.0
    rev: float = 0.0
    bstar: float = 0.0
    eqinc: float = 0.0
    ecc: float = 0.0
    mnan: float = 0.0
    argp: float = 0.0
    ascn: float = 0.0
    ndot2: float = 0.0
    nddot6: float = 0.0
    norb: int = 0
    desig: str = ""


def _atof(text: str) -> float:
    match = _FLOAT_RE.match(text)
    return float(match.group(1)) if match else 0.0


def _atol(text: str) -> int:
    match = _INT_RE.match(text)
    return int(match.group(1)) if match else 0


def _field(line: str, start: int, stop: int) -> str:
    """Columns start..stop, counted from 1 and inclusive."""
    return line[start - 1 : stop]


def _clean(raw: str) -> str:
    return raw.lstrip().rstrip("\r\n")


def _parse(line1: str, line2: str, satno: int) -> Orbit:
    year = _atol(_field(line1, 19, 20))
    year += 2000 if year < 57 else 1900
    nddot6 = _atof(_field(line1, 45, 50)) * 1.0e-5 * 10.0 ** _atof(_field(line1, 51, 52))
    bstar = _atof(_field(line1, 54, 59)) * 1.0e-5 * 10.0 ** _atof(_field(line1, 60, 61))
    return Orbit(
        satno=satno,
        ep_year=year,
        ep_day=_atof(_field(line1, 21, 32)),
        rev=_atof(_field(line2, 53, 63)),
        bstar=bstar,
        eqinc=math.radians(_atof(_field(line2, 9, 16))),
        ecc=_atof(_field(line2, 27, 33)) * 1.0e-7,
        mnan=math.radians(_atof(_field(line2, 44, 51))),
        argp=math.radians(_atof(_field(line2, 35, 42))),
        ascn=math.radians(_atof(_field(line2, 18, 25))),
        ndot2=_atof(_field(line1, 34, 43)),
        nddot6=nddot6,
        norb=_atol(_field(line2, 64, 68)),
        desig=line1[9:17],
    )


def iter_twoline(lines: Iterable[str], satno: int = 0) -> Iterator[Orbit]:
    """Yield orbits from two-line element text; satno 0 yields every object.

    Iteration stops at the end of input or at the first line 1 whose
    companion line 2 does not match.
    """
    source = iter(lines)
    while True:
        current = None
        for raw in source:
            candidate = _clean(raw)
            if candidate.startswith("1"):
                current = candidate
                break
        if current is None:
            return

        search = satno if satno > 0 else _atol(current[2:])
        key = f"1 {search:05d}"
        found = False
        while True:
            if current[:7] == key:
                found = True
                break
            raw = next(source, None)
            if raw is None:
                break
            current = _clean(raw)
        if not found:
            return

        second = _clean(next(source, ""))
        if second[:7] != f"2 {search:05d}":
            return
        yield _parse(current, second, search)


def read_twoline(lines: Iterable[str], satno: int = 0) -> Orbit:
    """Return the next matching orbit; raise LookupError if there is none."""
    orbit = next(iter_twoline(lines, satno), None)
    if orbit is None:
        raise LookupError(f"no two-line elements found for satellite {satno}")
    return orbit


def format_orbit(orb: Orbit) -> str:
    """Human-readable listing of the orbital elements."""
    rows = [
        f"# Satellite ID = {orb.satno}",
        f"# Satellite designation = {orb.desig}",
        f"# Epoch year = {orb.ep_year} day = {orb.ep_day:.8f}",
        f"# Eccentricity = {orb.ecc:.7f}",
        f"# Equatorial inclination = {math.degrees(orb.eqinc):.4f} deg",
        f"# Argument of perigee = {math.degrees(orb.argp):.4f} deg",
        f"# Mean anomaly = {math.degrees(orb.mnan):.4f} deg",
        f"# Right Ascension of Ascending Node = {math.degrees(orb.ascn):.4f} deg",
        f"# Mean Motion (number of rev/day) = {orb.rev:.8f}",
        f"# First derivative of mean motion = {orb.ndot2:e}",
        f"# Second derivative of mean motion = {orb.nddot6:e}",
        f"# BSTAR drag = {orb.bstar:.4e}",
        f"# Orbit number = {orb.norb}",
    ]
    return "\n".join(rows) + "\n"


def tle_to_ole(lines: Iterable[str]) -> Iterator[str]:
    """Join each name/line 1/line 2 triple into "line1 | line2 | name".

    Reading stops at the first empty line.
    """
    source = iter(lines)
    previous = ""
    for raw in source:
        line = raw.rstrip("\r\n")
        if not line:
            return
        if line.startswith("1"):
            second = next(source, "").rstrip("\r\n")
            yield f"{line} | {second} | {previous}"
        else:
            previous = line


def ole_to_tle(lines: Iterable[str]) -> Iterator[str]:
    """Split one-line elements back into name, line 1 and line 2."""
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            return
        yield line[144:214]
        yield line[:70]
        yield line[72:142]


def main(argv: list[str] | None = None) -> int:
    """Command line: convert a catalog between three-line and one-line form."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options, _ = getopt.getopt(args, "c:rh")
    except getopt.GetoptError:
        print(_USAGE, end="")
        return 0

    catalog = None
    reverse = False
    for option, value in options:
        if option == "-c":
            catalog = value
        elif option == "-r":
            reverse = True
        else:
            print(_USAGE, end="")
            return 0

    if catalog is None:
        print("tle2ole: no catalog given", file=sys.stderr)
        return 1

    with open(catalog, encoding="utf-8", errors="replace") as handle:
        converted = ole_to_tle(handle) if reverse else tle_to_ole(handle)
        for line in converted:
            print(line)
    return 0