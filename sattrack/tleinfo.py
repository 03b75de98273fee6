"""Listing, filtering and summarising two-line element catalogs."""

from __future__ import annotations

import getopt
import math
import os
import re
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from sattrack.astro import date2mjd, modulo
from sattrack.kepler import XKMPER, XMNPDA, SGDP4Error
from sattrack.sgdp4 import SGDP4
from sattrack.tle import Orbit, format_orbit, iter_twoline

XKE = 0.743669161e-1
CK2 = 5.413080e-4
TWOPI = 2.0 * math.pi

_USAGE = """\
usage: tleinfo [-c TLEFILE] [-u] [|-1|-f] [ |-n|-d] [-i SATNO] [-I INTLDESG ] [ |-a|-b] [-H] [-h]

-c TLEFILE  The file containing orbital elements in the form of TLEs, 3 lines per object
            default: ./bulk.tle
-i SATNO    Filter only elements for objects with this NORAD catalog identifier
-I INTLDESG Filter only elements for objects with this international designator
-u          Show only one object (MODE0 only)

Select MODE:
            MODE0: Show TLEs, object names or COSPAR designations
-1          MODE1: Show list of elements (one line per object)
-f          MODE2: Show human-readable parameters

Select INFOTYPE
MODE0:
  default   Show the TLEs itself
  -n        Show only the name of the objects
  -d        Show only the COSPAR designation of the objects

MODE1:
  default   SATNO, YEAR, DOY, INCL, ASCN, ARGP, MA, ECC, MM, BSTAR
  -a        SATNO, SEMI, PERIGEE, APOGEE, INCL, PERIOD, ECC
  -b        SATNO, YEAR, DOY, INCL, ASCN, ARGP, MA, ECC, MM, floor(MJD), LNG_AT_MIDNIGHT

-H          Show header (MODE1 only), default: disabled
-h          Print usage
"""

_HEADERS = {
    0: "SATNO YEAR DOY     INCL    ASCN     ARGP     MA       ECC      MM   BSTAR",
    1: "SATNO SEMI     PERIGEE  APOGEE    PERIOD  ECC",
    2: "SATNO YEAR DOY     INCL    ASCN     ARGP     MA       ECC      MM   "
    "floor(MJD) LNG_AT_MIDNIGHT",
}


@dataclass
class OrbitGeometry:
    """Size of an orbit: semi-major axis above the surface, perigee and
    apogee heights (km) and period (minutes)."""

    aodp: float
    perigee: float
    apogee: float
    period: float


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def doy2mjd(year: int, doy: float) -> float:
    """Modified Julian Date of a fractional day of year."""
    k = 1 if year % 4 == 0 and year % 400 != 0 else 2
    month = math.floor(9.0 * (k + doy) / 275.0 + 0.98)
    if doy < 32:
        month = 1
    day = doy - math.floor(275.0 * month / 9.0) + k * math.floor((month + 9.0) / 12.0) + 30.0
    return date2mjd(year, month, day)


def orbit_geometry(orb: Orbit) -> OrbitGeometry:
    """Recover the mean semi-major axis and derived heights from the elements."""
    xno = orb.rev * 2.0 * math.pi / XMNPDA
    eo = orb.ecc
    cos_i = math.cos(orb.eqinc)

    a1 = (XKE / xno) ** (2.0 / 3.0)
    betao2 = 1.0 - eo * eo
    betao = math.sqrt(betao2)
    temp0 = (1.5 * CK2) * cos_i * cos_i / (betao * betao2)
    del1 = temp0 / (a1 * a1)
    a0 = a1 * (1.0 - del1 * (1.0 / 3.0 + del1 * (1.0 + del1 * 134.0 / 81.0)))
    del0 = temp0 / (a0 * a0)
    xnodp = xno / (1.0 + del0)
    aodp = a0 / (1.0 - del0)
    return OrbitGeometry(
        aodp=(aodp - 1.0) * XKMPER,
        perigee=(aodp * (1.0 - eo) - 1.0) * XKMPER,
        apogee=(aodp * (1.0 + eo) - 1.0) * XKMPER,
        period=(TWOPI * 1440.0 / XMNPDA) / xnodp,
    )


def orbital_longitude_at_midnight(orb: Orbit, mjd0: float) -> float:
    """Argument of latitude (deg, [0, 360)) at 0h UT of the day holding mjd0."""
    model = SGDP4(orb)
    jd = math.floor(mjd0) + 2400000.5
    kep = model.propagate(1440.0 * (jd - model.jd0), True)
    return modulo(math.degrees(kep.theta), 360.0)


def _lines(handle: Iterable[str]) -> Iterator[str]:
    """Lines without their newline, ending at the first empty one."""
    for raw in handle:
        line = raw.rstrip("\n")
        if not line:
            return
        yield line


def _show_tles(handle, satno: int, intldesg: str | None, name: bool, desig: bool,
               unique: bool) -> None:
    source = _lines(handle)
    line0 = ""
    desg = ""
    for line1 in source:
        if line1.startswith("1"):
            line2 = next(source, "")
            no = _atoi(line1[2:])
            tokens = line1[9:].split()
            if tokens:
                desg = tokens[0]
            if (satno == 0 or satno == no) and intldesg is None:
                if name and not desig:
                    print(line0)
                elif desig and not name:
                    print(line1[9:17])
                else:
                    print(f"{line0}\n{line1}\n{line2}")
                if unique:
                    break
            elif intldesg is not None and desg == intldesg:
                print(f"{line0}\n{line1}\n{line2}")
        line0 = line1


def _list_elements(handle, satno: int, info: int, header: bool) -> None:
    if header:
        print(_HEADERS[info])
    for orb in iter_twoline(handle, satno):
        geom = orbit_geometry(orb)
        mjd = doy2mjd(orb.ep_year, orb.ep_day)
        angles = (
            f"{math.degrees(orb.eqinc):8.4f} {math.degrees(orb.ascn):8.4f} "
            f"{math.degrees(orb.argp):8.4f} {math.degrees(orb.mnan):8.4f}"
        )
        if info == 0:
            print(
                f"{orb.satno:05d} {mjd:10.4f} {angles} {orb.ecc:8.6f} "
                f"{orb.rev:8.5f} {orb.bstar:e}"
            )
        elif info == 1:
            print(
                f"{orb.satno:05d} {geom.perigee:6.0f} x {geom.apogee:6.0f} x "
                f"{math.degrees(orb.eqinc):6.2f} {geom.period:8.2f} {orb.ecc:8.6f} "
                f"{mjd:14.8f}"
            )
        else:
            try:
                lng = orbital_longitude_at_midnight(orb, mjd)
            except SGDP4Error as exc:
                print(f"tleinfo: {exc}", file=sys.stderr)
                continue
            print(
                f"{orb.satno:05d} {mjd:10.4f} {angles} {orb.ecc:8.6f} "
                f"{orb.rev:8.5f} {math.floor(mjd):10.4f} {lng:8.4f}"
            )


def main(argv: list[str] | None = None) -> int:
    """Command line: show TLEs, element lists or readable parameters."""
    args = sys.argv[1:] if argv is None else list(argv)
    tlefile = os.path.join(os.environ.get("ST_TLEDIR", ""), "bulk.tle")

    try:
        options, _ = getopt.getopt(args, "c:i:I:aH1ftndbu")
    except getopt.GetoptError:
        print(_USAGE, end="")
        return 0

    satno = 0
    mode = info = 0
    header = unique = name = desig = False
    intldesg: str | None = None
    for option, value in options:
        if option == "-c":
            tlefile = value
        elif option == "-u":
            unique = True
        elif option == "-1":
            mode = 1
        elif option == "-f":
            mode = 2
        elif option == "-n":
            name = True
        elif option == "-d":
            desig = True
        elif option == "-i":
            satno = _atoi(value)
        elif option == "-I":
            intldesg = value
        elif option == "-a":
            info = 1
        elif option == "-b":
            info = 2
        elif option == "-H":
            header = True
        else:
            print(_USAGE, end="")
            return 0

    try:
        handle = open(tlefile, encoding="utf-8", errors="replace")
    except OSError:
        print(f'File open failed for reading "{tlefile}"', file=sys.stderr)
        return 1

    with handle:
        if mode == 0:
            _show_tles(handle, satno, intldesg, name, desig, unique)
        elif mode == 1:
            _list_elements(handle, satno, info, header)
        else:
            for orb in iter_twoline(handle, satno):
                print(format_orbit(orb), end="")
    return 0