import socket
import threading

import pytest

from sattrack.astro import Site, gmst, mjd2nfd, modulo
from sattrack.slewto import build_packet, compute_pointing, main, send_position

SITE = Site(lat=52.0, lng=5.0, alt=0.0)
MJD = 58000.25


def test_build_packet_layout():
    packet = build_packet(" 01:02:03.00", "-10:20:30.0")
    assert packet == (
        "<newNumberVector device='iEQ' name='EQUATORIAL_EOD_COORD'>"
        "<oneNumber name='RA'> 01:02:03.00</oneNumber>"
        "<oneNumber name='DEC'>-10:20:30.0</oneNumber>"
        "</newNumberVector>"
    )


def test_horizontal_equatorial_round_trip():
    first = compute_pointing(SITE, MJD, azi=100.0, alt=40.0, orientation="horizontal")
    back = compute_pointing(SITE, MJD, ra=first.ra, de=first.de, orientation="equatorial")
    assert back.azi == pytest.approx(100.0)
    assert back.alt == pytest.approx(40.0)


def test_hour_angle_overrides_ra():
    p = compute_pointing(SITE, MJD, ra=123.0, de=10.0, ha=30.0, orientation="equatorial")
    assert modulo(gmst(MJD) + SITE.lng - p.ra, 360.0) == pytest.approx(30.0)
    assert p.ha == 30.0


@pytest.mark.parametrize("ra", [0.0, 45.0, 170.0, 200.0, 359.0])
def test_derived_hour_angle_folded(ra):
    p = compute_pointing(SITE, MJD, ra=ra, de=0.0, orientation="equatorial")
    assert -180.0 < p.ha <= 180.0
    assert modulo(p.ha, 360.0) == pytest.approx(modulo(gmst(MJD) + SITE.lng - ra, 360.0))


def test_no_orientation_keeps_inputs():
    p = compute_pointing(SITE, MJD, ra=10.0, de=20.0)
    assert (p.ra, p.de, p.azi, p.alt) == (10.0, 20.0, 0.0, 90.0)


def test_send_position_delivers_packet():
    server = socket.socket()
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    port = server.getsockname()[1]
    received = []

    def serve():
        conn, _ = server.accept()
        with conn:
            chunks = []
            while True:
                data = conn.recv(4096)
                if not data:
                    break
                chunks.append(data)
            received.append(b"".join(chunks))

    thread = threading.Thread(target=serve)
    thread.start()
    try:
        assert send_position("A", "B", host="127.0.0.1", port=port) is True
        thread.join(timeout=5)
    finally:
        server.close()
    assert received == [build_packet("A", "B").encode("ascii")]


def test_send_position_refused(capsys):
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    assert send_position("A", "B", host="127.0.0.1", port=port) is False
    assert "Connection refused" in capsys.readouterr().err


def test_main_dry_run_prints_pointing(monkeypatch, capsys):
    monkeypatch.delenv("ST_DATADIR", raising=False)
    monkeypatch.delenv("ST_COSPAR", raising=False)
    assert main(["-n", "-m", "51544.5", "-A", "30", "-E", "45"]) == 0
    last = capsys.readouterr().out.strip().splitlines()[-1]
    assert last.startswith(mjd2nfd(51544.5) + " R:")
    assert "A: 30.000 E: 45.000" in last


def test_main_reads_site(monkeypatch, tmp_path, capsys):
    data = tmp_path / "data"
    data.mkdir()
    (data / "sites.txt").write_text(
        "# comment\n4171 XX  52.0000   5.0000    10    Observer\n", encoding="utf-8"
    )
    monkeypatch.setenv("ST_DATADIR", str(tmp_path))
    monkeypatch.setenv("ST_COSPAR", "4171")
    assert main(["-n", "-m", "51544.5", "-R", "02:00:00", "-D", "10:00:00"]) == 0
    out = capsys.readouterr().out
    expected = compute_pointing(
        Site(lat=52.0, lng=5.0), 51544.5, ra=30.0, de=10.0, orientation="equatorial"
    )
    assert f"H: {expected.ha:7.3f}" in out
    assert "R: 02:00:00.00 D:  10:00:00.0" in out
    assert "not found" not in out


def test_main_help_prints_nothing(monkeypatch, capsys):
    monkeypatch.delenv("ST_DATADIR", raising=False)
    monkeypatch.delenv("ST_COSPAR", raising=False)
    assert main(["-h"]) == 0
    assert " R:" not in capsys.readouterr().out