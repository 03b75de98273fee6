import pytest

from sattrack.uk2iod import find_satno, main, uk_to_iod

PREFIX = "98067014353990115123456789"


def _line(prefix=PREFIX, fmt="2", ra="1234567 ", de="+451230 ", cang="20  ", epoch="5"):
    return prefix + " " + "10    " + fmt + ra + de + cang + epoch + "\n"


def _lookup(table):
    calls = []

    def lookup(desig):
        calls.append(desig)
        return table.get(desig, 99999)

    return lookup, calls


def test_format_two_conversion():
    lookup, calls = _lookup({"98067A": 25544})
    result = uk_to_iod(_line(), lookup)
    assert result == "25544 98 067A   4353 G 19990115123456789 17 25 1234567+451230 28"
    assert calls == ["98067A"]


def test_format_three_converts_minutes():
    lookup, _ = _lookup({})
    result = uk_to_iod(_line(fmt="3", de="+4550   "), lookup)
    assert result.split()[-2].endswith("+453000")
    assert " 35 " in result


def test_skips_non_digit_and_short_lines():
    lookup, calls = _lookup({})
    assert uk_to_iod("# comment line that is long enough " * 3, lookup) is None
    assert uk_to_iod("12345\n", lookup) is None
    assert calls == []


def test_unknown_angle_format_raises():
    lookup, _ = _lookup({})
    with pytest.raises(ValueError, match="Angle format"):
        uk_to_iod(_line(fmt="9"), lookup)


def test_bad_piece_raises():
    prefix = PREFIX[:5] + "26" + PREFIX[7:]
    lookup, _ = _lookup({})
    with pytest.raises(ValueError, match="designation"):
        uk_to_iod(_line(prefix=prefix), lookup)


def test_find_satno(tmp_path):
    path = tmp_path / "desig.txt"
    path.write_text("25544 98067A\n20580 90037B\n")
    assert find_satno(path, "98067A") == 25544
    assert find_satno(path, "90037B") == 20580
    assert find_satno(path, "00001A") == 20580


def test_find_satno_empty_file(tmp_path):
    path = tmp_path / "desig.txt"
    path.write_text("")
    assert find_satno(path, "98067A") == 99999


def test_main_converts_file(tmp_path, monkeypatch, capsys):
    data = tmp_path / "data"
    data.mkdir()
    (data / "desig.txt").write_text("25544 98067A\n")
    obs = tmp_path / "obs.txt"
    obs.write_text("header line\n" + _line() + _line(fmt="9"))
    monkeypatch.setenv("ST_DATADIR", str(tmp_path))
    assert main([str(obs)]) == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == [
        uk_to_iod(_line(), lambda desig: 25544)
    ]
    assert "Angle format not implemented!" in captured.err


def test_main_without_arguments():
    assert main([]) == 1