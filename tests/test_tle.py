import math

import pytest

from sattrack.tle import (
    Orbit,
    format_orbit,
    iter_twoline,
    main,
    ole_to_tle,
    read_twoline,
    tle_to_ole,
)

NAME = "ISS (ZARYA)"
L1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
L2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"
L1B = L1.replace("25544", "25545")
L2B = L2.replace("25544", "25545")


def test_read_twoline_fields():
    orb = read_twoline([NAME, L1, L2])
    assert orb.satno == 25544
    assert orb.ep_year == 2008
    assert orb.ep_day == pytest.approx(264.51782528)
    assert math.degrees(orb.eqinc) == pytest.approx(51.6416)
    assert math.degrees(orb.ascn) == pytest.approx(247.4627)
    assert math.degrees(orb.argp) == pytest.approx(130.5360)
    assert math.degrees(orb.mnan) == pytest.approx(325.0288)
    assert orb.ecc == pytest.approx(6.703e-4)
    assert orb.rev == pytest.approx(15.72125391)
    assert orb.norb == 56353
    assert orb.ndot2 == pytest.approx(-0.00002182)
    assert orb.bstar == pytest.approx(-1.1606e-5)
    assert orb.desig.strip() == "98067A"


def test_leading_whitespace_and_newlines_tolerated():
    orb = read_twoline([NAME + "\n", "  " + L1 + "\r\n", "\t" + L2 + "\n"])
    assert orb.satno == 25544
    assert orb.rev == pytest.approx(15.72125391)


def test_iter_all_and_filtered():
    lines = [NAME, L1, L2, "OTHER", L1B, L2B]
    assert [o.satno for o in iter_twoline(lines)] == [25544, 25545]
    assert [o.satno for o in iter_twoline(lines, 25545)] == [25545]


def test_shared_iterator_reads_successively():
    source = iter([NAME, L1, L2, "OTHER", L1B, L2B])
    assert read_twoline(source).satno == 25544
    assert read_twoline(source).satno == 25545
    with pytest.raises(LookupError):
        read_twoline(source)


def test_missing_satellite_raises():
    with pytest.raises(LookupError):
        read_twoline([NAME, L1, L2], 12345)


def test_mismatched_second_line_stops():
    assert list(iter_twoline([L1, L2B, L1B, L2B])) == []


def test_format_orbit_contains_fields():
    orb = read_twoline([NAME, L1, L2])
    text = format_orbit(orb)
    assert "# Satellite ID = 25544\n" in text
    assert "# Equatorial inclination = 51.6416 deg" in text
    assert text.count("\n") == 13


def test_format_orbit_default():
    text = format_orbit(Orbit())
    assert text.startswith("# Satellite ID = 0\n")


def test_tle_to_ole_joins_triples():
    assert list(tle_to_ole([NAME, L1, L2])) == [f"{L1} | {L2} | {NAME}"]


def test_tle_to_ole_stops_at_blank_line():
    result = list(tle_to_ole([NAME, L1, L2, "", "OTHER", L1B, L2B]))
    assert len(result) == 1


def test_ole_round_trip():
    ole = list(tle_to_ole([NAME, L1, L2, "OTHER", L1B, L2B]))
    back = [line.rstrip() for line in ole_to_tle(ole)]
    assert back == [NAME, L1, L2, "OTHER", L1B, L2B]


def test_main_forward_and_reverse(tmp_path, capsys):
    catalog = tmp_path / "cat.tle"
    catalog.write_text(f"{NAME}\n{L1}\n{L2}\n")
    assert main(["-c", str(catalog)]) == 0
    out = capsys.readouterr().out
    assert out == f"{L1} | {L2} | {NAME}\n"

    ole = tmp_path / "cat.ole"
    ole.write_text(out)
    assert main(["-c", str(ole), "-r"]) == 0
    lines = [line.rstrip() for line in capsys.readouterr().out.splitlines()]
    assert lines == [NAME, L1, L2]


def test_main_help(capsys):
    assert main(["-h"]) == 0
    assert "-c <catalog>" in capsys.readouterr().out