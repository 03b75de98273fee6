import math

import pytest

from sattrack.astro import date2mjd
from sattrack.kepler import Mode, SGDP4Error, kep2xyz
from sattrack.sgdp4 import SGDP4
from sattrack.tle import Orbit


def _report_orbit(**changes):
    values = dict(
        satno=88888,
        ep_year=1980,
        ep_day=275.98708465,
        rev=16.05824518,
        bstar=0.66816e-4,
        eqinc=math.radians(72.8435),
        ecc=0.0086731,
        mnan=math.radians(110.5714),
        argp=math.radians(52.6988),
        ascn=math.radians(115.9689),
    )
    values.update(changes)
    return Orbit(**values)


def _leo_orbit():
    return Orbit(
        satno=11111,
        ep_year=2020,
        ep_day=100.5,
        rev=15.5,
        bstar=1.0e-5,
        eqinc=math.radians(51.6),
        ecc=0.0005,
        mnan=math.radians(30.0),
        argp=math.radians(90.0),
        ascn=math.radians(200.0),
    )


def test_report_example_position_at_epoch():
    model = SGDP4(_report_orbit())
    kep = model.propagate(0.0)
    pos, _ = kep2xyz(kep)
    assert [pos.x, pos.y, pos.z] == pytest.approx(
        [2328.97048951, -5995.22076416, 1719.97067261], abs=1.0
    )


def test_low_perigee_uses_simplified_model():
    model = SGDP4(_report_orbit())
    assert model.mode == Mode.NEAR_SIMP
    assert model.perigee < 220.0


def test_normal_orbit_uses_full_model():
    model = SGDP4(_leo_orbit())
    assert model.mode == Mode.NEAR_NORM
    assert model.perigee >= 220.0
    assert model.apogee >= model.perigee


def test_epoch_julian_date():
    model = SGDP4(_report_orbit())
    expected = date2mjd(1980, 1, 1.0) + 2400000.5 + 275.98708465 - 1.0
    assert model.jd0 == pytest.approx(expected, abs=1e-8)


def test_two_digit_year_matches_full_year():
    assert SGDP4(_report_orbit(ep_year=80)).jd0 == SGDP4(_report_orbit()).jd0


def test_radius_matches_position_norm():
    model = SGDP4(_leo_orbit())
    kep = model.propagate(37.0)
    pos, _ = kep2xyz(kep)
    assert math.sqrt(pos.x**2 + pos.y**2 + pos.z**2) == pytest.approx(kep.radius)


def test_vis_viva_holds():
    model = SGDP4(_leo_orbit())
    kep = model.propagate(120.0)
    pos, vel = kep2xyz(kep)
    r = math.sqrt(pos.x**2 + pos.y**2 + pos.z**2)
    v2 = vel.x**2 + vel.y**2 + vel.z**2
    mu = 398600.8
    assert v2 == pytest.approx(mu * (2.0 / r - 1.0 / kep.smjaxs), rel=0.02)


def test_without_velocity_terms():
    model = SGDP4(_leo_orbit())
    slow = model.propagate(10.0, withvel=False)
    fast = model.propagate(10.0, withvel=True)
    assert slow.rdotk == 0.0 and slow.rfdotk == 0.0
    assert fast.rfdotk > 0.0
    assert slow.radius == pytest.approx(fast.radius)


def test_period_is_consistent_with_mean_motion():
    model = SGDP4(_leo_orbit())
    assert model.period == pytest.approx(1440.0 / 15.5, rel=0.01)


@pytest.mark.parametrize(
    "changes",
    [
        {"ecc": 1.0},
        {"ecc": -0.1},
        {"rev": 20.0},
        {"rev": 0.01},
        {"eqinc": 4.0},
        {"ep_year": 2150},
    ],
)
def test_invalid_elements_raise(changes):
    with pytest.raises(SGDP4Error):
        SGDP4(_report_orbit(**changes))


def test_deep_space_orbit_rejected():
    with pytest.raises(SGDP4Error):
        SGDP4(_report_orbit(rev=1.0027, ecc=0.0002, bstar=0.0))