"""Convert UK-format satellite observations into IOD format."""

from __future__ import annotations

import functools
import math
import os
import re
import struct
import sys
from collections.abc import Callable
from pathlib import Path

_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _f32(x: float) -> float:
    return struct.unpack("f", struct.pack("f", x))[0]


def _skip_space(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _scan_int(text: str, pos: int, width: int | None = None) -> tuple[int, int]:
    pos = _skip_space(text, pos)
    end = len(text) if width is None else min(len(text), pos + width)
    match = _INT_RE.match(text, pos, end)
    if match is None:
        raise ValueError(f"expected an integer at column {pos}")
    return int(match.group()), match.end()


def _scan_float(text: str, pos: int) -> float:
    pos = _skip_space(text, pos)
    match = _FLOAT_RE.match(text, pos)
    if match is None:
        raise ValueError(f"expected a number at column {pos}")
    return _f32(float(match.group()))


def find_satno(path: str | Path, desig: str) -> int:
    """Catalogue number for a designation in a "satno desig" file.

    When the designation is absent the number of the last entry read is
    returned, or 99999 for an empty file.
    """
    satno = 99999
    with open(path, encoding="utf-8", errors="replace") as handle:
        tokens = handle.read().split()
    for number, name in zip(tokens[::2], tokens[1::2]):
        try:
            satno = int(number)
        except ValueError:
            break
        if name == desig:
            break
    return satno


def uk_to_iod(line: str, lookup: Callable[[str], int]) -> str | None:
    """Convert one UK-format line (as read, newline included) into an IOD line.

    Lines not starting with a digit or shorter than 55 characters give None.
    ValueError is raised for designations or angle formats that cannot be
    converted. lookup maps a designation such as "98067A" to a catalogue number.
    """
    if not line[:1].isdigit() or len(line) < 55:
        return None

    pos = 0
    fields = []
    for width in (2, 3, 2, 4, 2, 2, 2, 2, 2, 2, 3):
        value, pos = _scan_int(line, pos, width)
        fields.append(value)
    intidy, intido, piece, site, year, month, day, hour, minute, sec, fsec = fields

    csec = _scan_float(line, 27)
    fmt, _ = _scan_int(line, 33, 1)
    rah = ram = rafm = ded = dem = defm = 0
    sign = " "
    if fmt in (2, 3):
        rah, p = _scan_int(line, 34, 2)
        ram, p = _scan_int(line, p, 2)
        rafm, _ = _scan_int(line, p)
        sign = line[42]
        ded, p = _scan_int(line, 43, 2)
        dem, p = _scan_int(line, p, 2)
        if fmt == 2:
            defm, _ = _scan_int(line, p)
    cang = _scan_float(line, 50)
    epoch, _ = _scan_int(line, 54)

    year += 1900 if year > 50 else 2000

    if piece >= 26:
        raise ValueError("Failed to understand designation!")
    letter = chr(piece + ord("A") - 1)
    desig = f"{intidy:02d} {intido:03d}{letter}"
    pdesig = f"{intidy:02d}{intido:03d}{letter}"

    if fmt == 3:
        x = _f32(dem * 0.6)
        dem = math.floor(x)
        defm = int(100.0 * (x - dem))
    elif fmt != 2:
        raise ValueError("Angle format not implemented!")

    if fsec < 10:
        fsec *= 100
    elif fsec < 100:
        fsec *= 10

    if csec < 10:
        csec = _f32(csec * 0.1)
    elif csec < 100:
        csec = _f32(csec * 0.01)
    tx = _f32(math.floor(math.log10(csec)) + 8)
    tm = _f32(math.floor(csec / 10.0 ** (tx - 8)))

    if cang >= 10 and cang < 100:
        cang = _f32(cang * 0.1)
    ax = _f32(math.floor(math.log10(cang)) + 8)
    am = _f32(math.floor(cang / 10.0 ** (ax - 8)))

    if rafm < 10:
        rafm *= 100
    elif rafm < 100:
        rafm *= 10

    if defm < 10:
        defm *= 10

    satno = lookup(pdesig)
    return (
        f"{satno:05d} {desig}   {site:04d} G "
        f"{year:04d}{month:02d}{day:02d}{hour:02d}{minute:02d}{sec:02d}{fsec:03d} "
        f"{tm:1.0f}{tx:1.0f} {fmt}{epoch} "
        f"{rah:02d}{ram:02d}{rafm:03d}{sign}{ded:02d}{dem:02d}{defm:02d} "
        f"{am:1.0f}{ax:1.0f}"
    )


def main(argv: list[str] | None = None) -> int:
    """Command line: convert a file of UK-format observations to IOD lines."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("usage: uk2iod <file>", file=sys.stderr)
        return 1

    datadir = os.environ.get("ST_DATADIR", "")
    desig_path = os.path.join(datadir, "data", "desig.txt")

    @functools.lru_cache(maxsize=None)
    def lookup(desig: str) -> int:
        return find_satno(desig_path, desig)

    with open(args[0], encoding="utf-8", errors="replace") as handle:
        for line in handle:
            try:
                result = uk_to_iod(line, lookup)
            except FileNotFoundError:
                print("Designation file not found!", file=sys.stderr)
                return 0
            except ValueError as exc:
                print(exc, file=sys.stderr)
                print(line.rstrip("\r\n"), file=sys.stderr)
                continue
            if result is not None:
                print(result)
    return 0