import math

import pytest

from sattrack.astro import (
    Site,
    date2mjd,
    dec2sex,
    equatorial2horizontal,
    gmst,
    horizontal2equatorial,
    mjd2nfd,
    modulo,
    nfd2mjd,
    parallactic_angle,
    read_site,
    sex2dec,
    sex2dec_main,
)


@pytest.mark.parametrize("x", [-725.5, -30.0, 0.0, 45.25, 719.0])
def test_modulo_range_and_periodicity(x):
    value = modulo(x, 360.0)
    assert 0.0 <= value < 360.0
    assert modulo(x + 360.0, 360.0) == pytest.approx(value)
    assert math.isclose(math.cos(math.radians(value)), math.cos(math.radians(x)), abs_tol=1e-12)


def test_date2mjd_j2000():
    assert date2mjd(2000, 1, 1.5) == pytest.approx(51544.5)


def test_mjd2nfd_j2000():
    assert mjd2nfd(51544.5) == "2000-01-01T12:00:00.000"


@pytest.mark.parametrize("mjd", [51544.5, 58000.123456, 60310.75, 45000.0])
def test_nfd_round_trip(mjd):
    assert nfd2mjd(mjd2nfd(mjd)) == pytest.approx(mjd, abs=2e-8)


def test_nfd2mjd_rejects_garbage():
    with pytest.raises(ValueError):
        nfd2mjd("yesterday")


def test_gmst_at_j2000():
    assert gmst(51544.5) == pytest.approx(280.46061837)


def test_gmst_advances_one_sidereal_day():
    assert modulo(gmst(60001.0) - gmst(60000.0), 360.0) == pytest.approx(0.98564736629, abs=1e-6)


def test_sex2dec_value():
    assert sex2dec("12:30:00") == pytest.approx(12.5)


def test_sex2dec_sign_symmetry():
    assert sex2dec("-01:30:36.5") == pytest.approx(-sex2dec("01:30:36.5"))


def test_sex2dec_needs_three_fields():
    with pytest.raises(ValueError):
        sex2dec("12")


@pytest.mark.parametrize("x", [0.25, 12.3456789, -45.678, 89.9])
def test_dec2sex_round_trip(x):
    text = dec2sex(x, 0, 5)
    assert sex2dec(text.strip()) == pytest.approx(x, abs=0.01 / 3600.0)
    assert text[0] == ("-" if x < 0 else " ")


def test_dec2sex_hms_form():
    text = dec2sex(5.5, 2, 4)
    assert text.endswith("s")
    assert "h" in text and "m" in text


def test_dec2sex_bad_length():
    with pytest.raises(ValueError):
        dec2sex(1.0, 0, 3)


def test_horizontal_equatorial_round_trip():
    site = Site(lat=52.0, lng=5.0)
    mjd = 60000.25
    azi, alt = equatorial2horizontal(site, mjd, 123.4, 40.0)
    ra, de = horizontal2equatorial(site, mjd, azi, alt)
    assert ra == pytest.approx(123.4, abs=1e-8)
    assert de == pytest.approx(40.0, abs=1e-8)


def test_zenith_altitude():
    site = Site(lat=52.0, lng=5.0)
    mjd = 60000.25
    _, alt = equatorial2horizontal(site, mjd, gmst(mjd) + site.lng, site.lat)
    assert alt == pytest.approx(90.0, abs=1e-6)


def test_parallactic_angle_antisymmetric():
    site = Site(lat=52.0, lng=5.0)
    mjd = 60000.25
    lst = gmst(mjd) + site.lng
    east = parallactic_angle(site, mjd, lst + 15.0, 20.0)
    west = parallactic_angle(site, mjd, lst - 15.0, 20.0)
    assert east == pytest.approx(-west)


def test_read_site(tmp_path):
    line = f"{4171:4d} XX {52.1:9.4f} {4.4:9.4f} {10:6.0f}".ljust(38) + "Test Observer"
    path = tmp_path / "sites.txt"
    path.write_text("# header\n" + line + "\n")
    site = read_site(path, 4171)
    assert site.site_id == 4171
    assert site.lat == pytest.approx(52.1)
    assert site.lng == pytest.approx(4.4)
    assert site.alt * 1000.0 == pytest.approx(10.0)
    assert site.observer == "Test Observer"
    assert read_site(path, 1) is None


def test_sex2dec_main_hours_to_degrees(capsys):
    assert sex2dec_main(["01:02:03"]) == 0
    plain = float(capsys.readouterr().out)
    assert sex2dec_main(["-r", "01:02:03"]) == 0
    scaled = float(capsys.readouterr().out)
    assert scaled == pytest.approx(15.0 * plain, abs=1e-5)


def test_sex2dec_main_without_arguments(capsys):
    assert sex2dec_main([]) == -1
    assert "Usage: sex2dec" in capsys.readouterr().out