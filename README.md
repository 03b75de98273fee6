# sattrack

Tools for tracking artificial satellites from two-line element (TLE)
catalogues: reading and reformatting TLEs, propagating near-earth orbits
with the SGP4 model, converting state vectors between the TEME and J2000
frames, turning state vectors back into elements, converting observation
formats, and pointing a telescope mount.

Pure Python, no third-party dependencies. Python 3.10 or later.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Environment

Several commands take their defaults from environment variables:

- `ST_TLEDIR` – directory holding the TLE catalogues (`classfd.tle` for
  `tle2rv` and `vadd`, `bulk.tle` for `tleinfo`).
- `ST_DATADIR` – data directory; `slewto` reads site information from
  `$ST_DATADIR/data/sites.txt` and `uk2iod` reads designations from
  `$ST_DATADIR/data/desig.txt`.
- `ST_COSPAR` – COSPAR number of the observing site used by `slewto`.

## Commands

### tleinfo

Show TLEs, names, designations or derived orbital parameters from a catalogue.

```
tleinfo -c catalog.tle -i 25544          # the TLE of one object
tleinfo -c catalog.tle -u                # only the first object
tleinfo -c catalog.tle -n                # object names only
tleinfo -c catalog.tle -d                # COSPAR designations only
tleinfo -c catalog.tle -I 98067A         # filter on international designator
tleinfo -c catalog.tle -1 -H             # one line of elements per object, with header
tleinfo -c catalog.tle -1 -a             # perigee, apogee, inclination, period
tleinfo -c catalog.tle -1 -b             # elements with argument of latitude at midnight
tleinfo -c catalog.tle -f                # human-readable parameters
```

### tle2rv

Propagate TLEs to an epoch (default: now) and print position (km) and
velocity (km/s) vectors.

```
tle2rv -c catalog.tle -i 25544 -t 2024-01-01T00:00:00   # TEME output
tle2rv -c catalog.tle -m 60310.0 -j                     # J2000 output
tle2rv -c catalog.tle -e -g                             # at TLE epoch, GMAT format
```

Objects that cannot be propagated are reported on standard error and skipped.

### vadd

Propagate an object, add a velocity change (m/s) in the `radial`
(default), `prograde` or `normal` direction, fit new mean elements to the
resulting state and print them as a TLE. `-I` gives the new elements a
different catalogue number (and the designation `15999A`).

```
vadd -c catalog.tle -i 25544 -t 2024-01-01T00:00:00 -v 10 -d prograde
vadd -c catalog.tle -i 25544 -m 60310.0 -v 5 -d normal -I 90001
```

### tle2ole

Convert a three-line catalogue to one object per line
(`line1 | line2 | name`), and back with `-r`. Reading stops at the first
empty line.

```
tle2ole -c catalog.tle > catalog.ole
tle2ole -c catalog.ole -r > catalog.tle
```

### uk2iod

Convert observations in the UK format to IOD lines, looking up catalogue
numbers in `$ST_DATADIR/data/desig.txt`. Lines that cannot be converted
are reported on standard error.

```
uk2iod observations.txt
```

### sex2dec

Convert a sexagesimal value (`dd:mm:ss.ss`) to decimal; `-r` converts
hours to degrees.

```
sex2dec 12:30:00
sex2dec -r 12:30:00
sex2dec -45:30:00
```

### slewto

Compute the pointing for a target given in equatorial (`-R`, `-D`, or hour
angle `-H`) or horizontal (`-A`, `-E`) coordinates at a time given by `-t`
or `-m` (default: now), print it, send it to a mount controller at
127.0.0.1 port 7624 and append it to `position.txt`. Use `-n` for a dry run
that only prints.

```
slewto -n -R 12:30:00 -D +45:00:00
slewto -t 2024-01-01T22:00:00 -A 180 -E 45
slewto -m 60310.9 -H 0 -D +10:00:00
```

## Library use

```python
from sattrack.tle import read_twoline
from sattrack.sgdp4 import SGDP4
from sattrack.astro import nfd2mjd

with open("catalog.tle") as handle:
    orbit = read_twoline(handle, 25544)

model = SGDP4(orbit)
mjd = nfd2mjd("2024-01-01T00:00:00")
position, velocity = model.position(mjd + 2400000.5, True)
```

`read_twoline` raises `LookupError` when no elements match;
`SGDP4` raises `SGDP4Error` for elements out of range and when propagation
fails.

Other building blocks:

- `sattrack.astro` – dates (`date2mjd`, `mjd2nfd`, `nfd2mjd`, `nfd_now`),
  sidereal time (`gmst`), sexagesimal conversion (`sex2dec`, `dec2sex`),
  equatorial/horizontal transforms and `parallactic_angle` for a `Site`,
  and `read_site` for `sites.txt` files.
- `sattrack.tle` – the `Orbit` elements, `iter_twoline`, `read_twoline`,
  `format_orbit`, `tle_to_ole`, `ole_to_tle`.
- `sattrack.sgdp4` – the `SGDP4` model with `propagate` and `position`.
- `sattrack.kepler` – `Kepler` state, `Vector`, `kep2xyz`, model `Mode`
  and `SGDP4Error`.
- `sattrack.frames` – `nutation`, `precession_angles` and `icrs_to_teme`
  with small 3×3 matrix and vector helpers.
- `sattrack.vadd` – `mjd2doy`, `classel`, `rv2el`, `format_tle`,
  `tle_checksum`, `velocity_kick`.
- `sattrack.tleinfo` – `orbit_geometry`, `doy2mjd`,
  `orbital_longitude_at_midnight`.
- `sattrack.uk2iod` – `uk_to_iod` and `find_satno`.
- `sattrack.slewto` – `compute_pointing`, `build_packet`, `send_position`.
- `sattrack.simplex` – initial simplex construction for downhill fitting.

## What the package does not do

- Only near-earth orbits are propagated. Orbits with a period of 225
  minutes or more need the deep-space model, which the package does not
  have; `SGDP4` raises `SGDP4Error` for them.
- There is no graphical sky map, no plotting of satellite tracks or
  observations, and no viewer for observation images.