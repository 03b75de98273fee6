"""Time, angle and coordinate helpers for observing sites."""

from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

D2R = math.pi / 180.0
R2D = 180.0 / math.pi
MJD_J2000 = 51544.5

_FLOAT_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_NFD_RE = re.compile(
    r"\s*(\d{1,4})-(\d{1,2})-(\d{1,2})T(\d{1,2}):(\d{1,2}):(\d+(?:\.\d*)?)"
)
_SEX_FORMS = ("::", ",,", "hms", "  ")
_SEC_FORMATS = {7: "07.4f", 6: "06.3f", 5: "05.2f", 4: "04.1f"}


@dataclass
class Site:
    """An observing site: geodetic latitude/longitude (deg) and altitude (km)."""

    lat: float = 0.0
    lng: float = 0.0
    alt: float = 0.0
    site_id: int = 0
    observer: str = ""


def _atof(text: str) -> float:
    match = _FLOAT_RE.match(text)
    return float(match.group(1)) if match else 0.0


def modulo(x: float, y: float) -> float:
    """Return x modulo y in the range [0, y)."""
    x = math.fmod(x, y)
    if x < 0.0:
        x += y
    return x


def date2mjd(year: int, month: int, day: float) -> float:
    """Modified Julian Date of a calendar date with fractional day."""
    if month < 3:
        year -= 1
        month += 12
    a = math.floor(year / 100.0)
    b = int(2.0 - a + math.floor(a / 4.0))
    if year < 1582:
        b = 0
    if year == 1582 and month < 10:
        b = 0
    if year == 1582 and month == 10 and day <= 4:
        b = 0
    jd = (
        math.floor(365.25 * (year + 4716))
        + math.floor(30.6001 * (month + 1))
        + day
        + b
        - 1524.5
    )
    return jd - 2400000.5


def mjd2nfd(mjd: float) -> str:
    """Format a Modified Julian Date as YYYY-MM-DDThh:mm:ss.sss."""
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

    dday = b - d - math.floor(30.6001 * e) + f
    month = e - 1 if e < 14 else e - 13
    year = c - 4716 if month > 2 else c - 4715

    day = math.floor(dday)
    x = 3600.0 * abs(24.0 * (dday - day))
    sec = math.fmod(x, 60.0)
    x = (x - sec) / 60.0
    minute = int(math.fmod(x, 60.0))
    x = (x - minute) / 60.0
    hour = int(x)
    sec = math.floor(1000.0 * sec) / 1000.0
    return f"{year:04d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{sec:06.3f}"


def nfd2mjd(date: str) -> float:
    """Parse YYYY-MM-DDThh:mm:ss[.sss] into a Modified Julian Date."""
    match = _NFD_RE.match(date)
    if match is None:
        raise ValueError(f"malformed date/time: {date!r}")
    year, month, day, hour, minute = (int(g) for g in match.groups()[:5])
    sec = float(match.group(6))
    dday = day + hour / 24.0 + minute / 1440.0 + sec / 86400.0
    return date2mjd(year, month, dday)


def nfd_now() -> str:
    """Current UTC time as YYYY-MM-DDThh:mm:ss."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")


def gmst(mjd: float) -> float:
    """Greenwich Mean Sidereal Time in degrees."""
    t = (mjd - MJD_J2000) / 36525.0
    return modulo(
        280.46061837
        + 360.98564736629 * (mjd - MJD_J2000)
        + t * t * (0.000387933 - t / 38710000),
        360.0,
    )


def _parse_sexagesimal(text: str, separators: str) -> float:
    tokens = [t for t in re.split(f"[{re.escape(separators)}]", text) if t]
    if len(tokens) < 3:
        raise ValueError(f"expected three sexagesimal fields in {text!r}")
    deg, minute, sec = (abs(_atof(t)) for t in tokens[:3])
    return deg + minute / 60.0 + sec / 3600.0


def sex2dec(text: str) -> float:
    """Convert a sexagesimal string such as -dd:mm:ss.ss to decimal."""
    x = _parse_sexagesimal(text, " :")
    return -x if text.startswith("-") else x


def dec2sex(x: float, form: int = 0, length: int = 5) -> str:
    """Format a decimal value as sexagesimal with the given separator form and precision."""
    if not 0 <= form < len(_SEX_FORMS):
        raise ValueError(f"unknown sexagesimal form {form}")
    if length not in _SEC_FORMATS and length != 2:
        raise ValueError(f"unsupported sexagesimal length {length}")
    separators = _SEX_FORMS[form]
    first, second = separators[0], separators[1]
    last = separators[2] if len(separators) > 2 else ""

    sign = "-" if x < 0 else " "
    x = 3600.0 * abs(x)
    sec = math.fmod(x, 60.0)
    x = (x - sec) / 60.0
    minute = math.fmod(x, 60.0)
    deg = (x - minute) / 60.0

    if length == 2:
        sec_text = f"{math.floor(sec):02d}"
    else:
        sec_text = format(sec, _SEC_FORMATS[length])
    return f"{sign}{int(deg):02d}{first}{int(minute):02d}{second}{sec_text}{last}"


def equatorial2horizontal(site: Site, mjd: float, ra: float, de: float) -> tuple[float, float]:
    """Convert RA/Dec (deg) to azimuth (from south) and altitude (deg)."""
    h = gmst(mjd) + site.lng - ra
    lat = site.lat * D2R
    azi = modulo(
        math.atan2(
            math.sin(h * D2R),
            math.cos(h * D2R) * math.sin(lat) - math.tan(de * D2R) * math.cos(lat),
        )
        * R2D,
        360.0,
    )
    alt = (
        math.asin(
            math.sin(lat) * math.sin(de * D2R)
            + math.cos(lat) * math.cos(de * D2R) * math.cos(h * D2R)
        )
        * R2D
    )
    return azi, alt


def horizontal2equatorial(site: Site, mjd: float, azi: float, alt: float) -> tuple[float, float]:
    """Convert azimuth (from south) and altitude (deg) to RA/Dec (deg)."""
    lat = site.lat * D2R
    h = (
        math.atan2(
            math.sin(azi * D2R),
            math.cos(azi * D2R) * math.sin(lat) + math.tan(alt * D2R) * math.cos(lat),
        )
        * R2D
    )
    ra = modulo(gmst(mjd) + site.lng - h, 360.0)
    de = (
        math.asin(
            math.sin(lat) * math.sin(alt * D2R)
            - math.cos(lat) * math.cos(alt * D2R) * math.cos(azi * D2R)
        )
        * R2D
    )
    return ra, de


def parallactic_angle(site: Site, mjd: float, ra: float, de: float) -> float:
    """Parallactic angle (deg) of a position seen from the site."""
    h = gmst(mjd) + site.lng - ra
    return (
        math.atan2(
            math.sin(h * D2R),
            math.tan(site.lat * D2R) * math.cos(de * D2R)
            - math.sin(de * D2R) * math.cos(h * D2R),
        )
        * R2D
    )


def read_site(path: str | Path, site_id: int) -> Site | None:
    """Look up a site in a sites.txt file; return None if the id is absent."""
    found = None
    with open(path, encoding="utf-8", errors="replace") as handle:
        for raw in handle:
            if "#" in raw:
                continue
            line = raw.rstrip("\r\n")
            fields = line.split()
            if len(fields) < 5:
                continue
            try:
                ident = int(fields[0])
                lat, lng, alt = float(fields[2]), float(fields[3]), float(fields[4])
            except ValueError:
                continue
            if ident == site_id:
                found = Site(lat=lat, lng=lng, alt=alt / 1000.0, site_id=ident, observer=line[38:])
    return found


def sex2dec_main(argv: list[str] | None = None) -> int:
    """Command line: print the decimal value of a sexagesimal argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print(
            "Usage: sex2dec -r <hh:mm:ss.sss>\n    -or-    <ddd:mm:ss.sss>\n"
            "Compute sexagesimal from decimal input x."
        )
        print("Options: -r Converts hours into degrees")
        return -1

    text = args[-1]
    sign = -1.0 if text.startswith("-") else 1.0
    x = _parse_sexagesimal(text, " :,")
    for option in args[:-1]:
        if not option.startswith("-"):
            break
        x *= 15.0 ** option[1:].count("r")
    print(f"{sign * x:.6f}")
    return 0