import math

import pytest

from sattrack.kepler import Kepler, Vector, kep2xyz


def test_reference_orientation():
    pos, vel = kep2xyz(Kepler(radius=7000.0, rdotk=1.0, rfdotk=7.5))
    assert tuple(pos) == pytest.approx((7000.0, 0.0, 0.0))
    assert tuple(vel) == pytest.approx((1.0, 7.5, 0.0))


def test_zero_state_gives_zero_vectors():
    pos, vel = kep2xyz(Kepler())
    assert tuple(pos) == (0.0, 0.0, 0.0)
    assert tuple(vel) == (0.0, 0.0, 0.0)


def _dot(a: Vector, b: Vector) -> float:
    return a.x * b.x + a.y * b.y + a.z * b.z


@pytest.mark.parametrize(
    "theta,eqinc,ascn",
    [(0.3, 0.9, 2.1), (4.0, 1.7, 5.5), (1.1, 0.0, 0.7), (2.9, math.pi, 1.0)],
)
def test_radius_and_speed_preserved(theta, eqinc, ascn):
    kep = Kepler(radius=7100.0, theta=theta, eqinc=eqinc, ascn=ascn, rdotk=0.4, rfdotk=7.2)
    pos, vel = kep2xyz(kep)
    assert math.sqrt(_dot(pos, pos)) == pytest.approx(7100.0)
    assert _dot(vel, vel) == pytest.approx(0.4**2 + 7.2**2)
    assert _dot(pos, vel) == pytest.approx(7100.0 * 0.4)


def test_equatorial_orbit_has_no_z():
    pos, vel = kep2xyz(Kepler(radius=8000.0, theta=1.2, eqinc=0.0, ascn=0.5, rfdotk=7.0))
    assert pos.z == pytest.approx(0.0)
    assert vel.z == pytest.approx(0.0)


def test_polar_orbit_quarter_turn_reaches_pole():
    pos, _ = kep2xyz(Kepler(radius=7000.0, theta=math.pi / 2, eqinc=math.pi / 2))
    assert pos.z == pytest.approx(7000.0)