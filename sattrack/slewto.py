"""Point a telescope mount at an equatorial or horizontal position."""

from __future__ import annotations

import getopt
import os
import re
import socket
import sys
from dataclasses import dataclass

from sattrack.astro import (
    Site,
    dec2sex,
    equatorial2horizontal,
    gmst,
    horizontal2equatorial,
    mjd2nfd,
    modulo,
    nfd2mjd,
    nfd_now,
    parallactic_angle,
    read_site,
    sex2dec,
)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7624

_FLOAT_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _atof(text: str) -> float:
    match = _FLOAT_RE.match(text)
    return float(match.group(1)) if match else 0.0


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


@dataclass
class Pointing:
    """A resolved pointing: RA/Dec, azimuth (from south)/altitude, hour angle
    and parallactic angle, all in degrees."""

    mjd: float
    ra: float
    de: float
    azi: float
    alt: float
    ha: float
    q: float


def build_packet(sra: str, sde: str) -> str:
    """XML message requesting the mount to slew to the given coordinates."""
    return (
        "<newNumberVector device='iEQ' name='EQUATORIAL_EOD_COORD'>"
        f"<oneNumber name='RA'>{sra}</oneNumber>"
        f"<oneNumber name='DEC'>{sde}</oneNumber>"
        "</newNumberVector>"
    )


def send_position(
    sra: str, sde: str, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT
) -> bool:
    """Send a slew request over TCP; return False if the connection fails."""
    packet = build_packet(sra, sde).encode("ascii")
    try:
        with socket.create_connection((host, port), timeout=10.0) as conn:
            conn.sendall(packet)
    except OSError:
        print("Connection refused by remote host.", file=sys.stderr)
        return False
    return True


def compute_pointing(
    site: Site,
    mjd: float,
    ra: float = 0.0,
    de: float = 0.0,
    azi: float = 0.0,
    alt: float = 90.0,
    ha: float | None = None,
    orientation: str = "",
) -> Pointing:
    """Resolve a pointing from whichever coordinates the orientation names.

    A given hour angle overrides ra; otherwise the hour angle is derived
    from ra and folded into (-180, 180].
    """
    if ha is not None:
        ra = modulo(gmst(mjd) + site.lng - ha, 360.0)
    else:
        ha = modulo(gmst(mjd) + site.lng - ra, 360.0)
        if ha > 180.0:
            ha -= 360.0

    if orientation == "horizontal":
        ra, de = horizontal2equatorial(site, mjd, azi, alt)
    elif orientation == "equatorial":
        azi, alt = equatorial2horizontal(site, mjd, ra, de)

    q = parallactic_angle(site, mjd, ra, de)
    return Pointing(mjd=mjd, ra=ra, de=de, azi=azi, alt=alt, ha=ha, q=q)


def _initial_site() -> Site:
    site = Site()
    datadir = os.environ.get("ST_DATADIR")
    if datadir is None:
        print("ST_DATADIR environment variable not found.")
        datadir = ""
    cospar = os.environ.get("ST_COSPAR")
    if cospar is None:
        print("ST_COSPAR environment variable not found.")
        return site
    try:
        found = read_site(os.path.join(datadir, "data", "sites.txt"), _atoi(cospar))
    except OSError:
        print("File with site information not found!")
        return site
    return found if found is not None else site


def main(argv: list[str] | None = None) -> int:
    """Command line: compute a pointing, print it and send it to the mount."""
    args = sys.argv[1:] if argv is None else list(argv)
    site = _initial_site()

    nfd = nfd_now()
    mjd = nfd2mjd(nfd)

    try:
        options, _ = getopt.getopt(args, "m:t:H:R:D:A:E:hn")
    except getopt.GetoptError:
        return 0

    dry = False
    ha: float | None = None
    ra, de, azi, alt = 0.0, 0.0, 0.0, 90.0
    orientation = ""
    for option, value in options:
        if option == "-n":
            dry = True
        elif option == "-t":
            nfd = value
            try:
                mjd = nfd2mjd(nfd)
            except ValueError as exc:
                print(f"slewto: {exc}", file=sys.stderr)
                return 1
        elif option == "-m":
            mjd = _atof(value)
            nfd = mjd2nfd(mjd)
        elif option == "-H":
            ha = _atof(value)
            orientation = "equatorial"
        elif option == "-R":
            ra = 15.0 * sex2dec(value)
            orientation = "equatorial"
        elif option == "-D":
            de = sex2dec(value)
            orientation = "equatorial"
        elif option == "-A":
            azi = modulo(_atof(value) + 180.0, 360.0)
            orientation = "horizontal"
        elif option == "-E":
            alt = _atof(value)
            orientation = "horizontal"
        else:
            return 0

    p = compute_pointing(site, mjd, ra, de, azi, alt, ha, orientation)
    sra = dec2sex(p.ra / 15.0, 0, 5)
    sde = dec2sex(p.de, 0, 4)
    print(
        f"{nfd} R:{sra} D: {sde} H: {p.ha:7.3f} "
        f"A: {modulo(p.azi - 180.0, 360.0):6.3f} E: {p.alt:6.3f} q: {p.q:5.2f}"
    )

    if not dry:
        send_position(sra, sde)
        with open("position.txt", "a", encoding="utf-8") as log:
            log.write(f"{nfd} {p.ra:f} {p.de:f} {p.q:f}\n")
    return 0