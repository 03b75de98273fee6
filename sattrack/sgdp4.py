"""Near-earth SGP4 orbital model for two-line element sets."""

from __future__ import annotations

import math
import sys

from sattrack.kepler import AE, XKMPER, XMNPDA, Kepler, Mode, SGDP4Error, Vector, kep2xyz
from sattrack.tle import Orbit

ECC_ZERO = 0.0
ECC_ALL = 1.0e-4
ECC_EPS = 1.0e-6
ECC_LIMIT_LOW = -1.0e-3
ECC_LIMIT_HIGH = 1.0 - ECC_EPS
EPS_COSIO = 1.5e-12
TOTHRD = 2.0 / 3.0
NR_EPS = 1.0e-12
MAXI = 10

XJ2 = 1.082616e-3
XJ3 = -2.53881e-6
XJ4 = -1.65597e-6
XKE = 7.43669161331734132e-2
CK2 = 0.5 * XJ2 * AE * AE
CK4 = -0.375 * XJ4 * AE * AE * AE * AE
QOMS2T = 1.880279159015270643865e-9
KS = AE * (1.0 + 78.0 / XKMPER)
A3OVK2 = -XJ3 / CK2 * (AE * AE * AE)

TWOPI = 2.0 * math.pi
JD1900 = 2415020.5
"""Julian date of 1900 January 1, 0h UT."""

_VEL_SCALE = XKMPER / AE * XMNPDA / 86400.0


def _sign(a: float, b: float) -> float:
    return math.copysign(abs(a), b)


class SGDP4:
    """Orbital elements prepared for propagation with the SGP4 model.

    Construction raises SGDP4Error for elements out of range and for
    deep-space orbits, which this model does not support.
    """

    def __init__(self, orbit: Orbit) -> None:
        iyear = int(orbit.ep_year)
        if iyear < 1957:
            iyear += 2000 if iyear < 57 else 1900
        if iyear < 1901 or iyear > 2099:
            raise SGDP4Error(f"Satellite ep_year error {iyear}")

        self.satno = orbit.satno
        iday = ((iyear - 1901) * 1461) // 4 + 364 + 1
        self.jd0 = JD1900 + iday + (orbit.ep_day - 1.0)

        eo = float(orbit.ecc)
        xno = float(orbit.rev) * TWOPI / XMNPDA
        xincl = float(orbit.eqinc)
        self._eo = eo
        self._xno = xno
        self._xincl = xincl
        self._xnodeo = float(orbit.ascn)
        self._omegao = float(orbit.argp)
        self._xmo = float(orbit.mnan)
        self._bstar = bstar = float(orbit.bstar)

        if eo < 0.0 or eo > ECC_LIMIT_HIGH:
            raise SGDP4Error(f"Eccentricity out of range for {self.satno} ({eo:e})")
        if xno < 0.035 * TWOPI / XMNPDA or xno > 18.0 * TWOPI / XMNPDA:
            raise SGDP4Error(f"Mean motion out of range {self.satno} ({xno:e})")
        if xincl < 0.0 or xincl > math.pi:
            raise SGDP4Error(
                f"Equatorial inclination out of range {self.satno} ({math.degrees(xincl):e})"
            )

        mode = Mode.ZERO_ECC if eo < ECC_ZERO else Mode.NOT_INIT

        sin_io, cos_io = math.sin(xincl), math.cos(xincl)
        self._sin_io, self._cos_io = sin_io, cos_io
        theta2 = cos_io * cos_io
        theta4 = theta2 * theta2
        self._x3thm1 = x3thm1 = 3.0 * theta2 - 1.0
        self._x1mth2 = x1mth2 = 1.0 - theta2
        self._x7thm1 = 7.0 * theta2 - 1.0

        a1 = (XKE / xno) ** TOTHRD
        betao2 = 1.0 - eo * eo
        betao = math.sqrt(betao2)
        temp0 = (1.5 * CK2) * x3thm1 / (betao * betao2)
        del1 = temp0 / (a1 * a1)
        a0 = a1 * (1.0 - del1 * (1.0 / 3.0 + del1 * (1.0 + del1 * 134.0 / 81.0)))
        del0 = temp0 / (a0 * a0)
        self._xnodp = xnodp = xno / (1.0 + del0)
        self._aodp = aodp = a0 / (1.0 - del0)
        self.perigee = perigee = (aodp * (1.0 - eo) - AE) * XKMPER
        self.apogee = (aodp * (1.0 + eo) - AE) * XKMPER
        self.period = period = (TWOPI * 1440.0 / XMNPDA) / xnodp

        if perigee <= 0.0:
            print(
                f"# Satellite {self.satno} sub-orbital "
                f"(apogee = {self.apogee:.1f} km, perigee = {perigee:.1f} km)",
                file=sys.stderr,
            )

        # Coefficients used by propagate(); zeroed unless the mode sets them.
        self._c1 = self._c4 = self._c5 = 0.0
        self._d2 = self._d3 = self._d4 = 0.0
        self._omgcof = self._xmcof = 0.0
        self._t2cof = self._t3cof = self._t4cof = self._t5cof = 0.0
        self._xnodcf = self._delmo = self._eta = 0.0
        self._xmdot = self._omgdot = self._xnodot = 0.0
        self._sin_xmo = math.sin(self._xmo)
        self._xlcof = self._aycof = 0.0

        if mode == Mode.ZERO_ECC:
            self.mode = mode
            return

        if period >= 225.0:
            raise SGDP4Error("Deep space equations not supported")
        mode = Mode.NEAR_SIMP if perigee < 220.0 else Mode.NEAR_NORM
        self.mode = mode

        if perigee < 156.0:
            s4 = perigee - 78.0
            if s4 < 20.0:
                print(
                    f"# Very low s4 constant for sat {self.satno} (perigee = {perigee:.2f})",
                    file=sys.stderr,
                )
                s4 = 20.0
            else:
                print(
                    f"# Changing s4 constant for sat {self.satno} (perigee = {perigee:.2f})",
                    file=sys.stderr,
                )
            qoms24 = ((120.0 - s4) * (AE / XKMPER)) ** 4
            s4 = s4 / XKMPER + AE
        else:
            s4 = KS
            qoms24 = QOMS2T

        pinvsq = 1.0 / (aodp * aodp * betao2 * betao2)
        tsi = 1.0 / (aodp - s4)
        self._eta = eta = aodp * eo * tsi
        etasq = eta * eta
        eeta = eo * eta
        psisq = abs(1.0 - etasq)
        coef = qoms24 * tsi ** 4
        coef1 = coef / psisq ** 3.5

        c2 = coef1 * xnodp * (
            aodp * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
            + (0.75 * CK2) * tsi / psisq * x3thm1 * (8.0 + 3.0 * etasq * (8.0 + etasq))
        )
        self._c1 = c1 = bstar * c2
        self._c4 = 2.0 * xnodp * coef1 * aodp * betao2 * (
            eta * (2.0 + 0.5 * etasq)
            + eo * (0.5 + 2.0 * etasq)
            - (2.0 * CK2) * tsi / (aodp * psisq)
            * (
                -3.0 * x3thm1 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
                + 0.75 * x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq))
                * math.cos(2.0 * self._omegao)
            )
        )

        if mode == Mode.NEAR_NORM:
            self._c5 = 2.0 * coef1 * aodp * betao2 * (
                1.0 + 2.75 * (etasq + eeta) + eeta * etasq
            )
            c3 = 0.0
            if eo > ECC_ALL:
                c3 = coef * tsi * A3OVK2 * xnodp * AE * sin_io / eo
            self._omgcof = bstar * c3 * math.cos(self._omegao)

        temp1 = (3.0 * CK2) * pinvsq * xnodp
        temp2 = temp1 * CK2 * pinvsq
        temp3 = (1.25 * CK4) * pinvsq * pinvsq * xnodp

        self._xmdot = xnodp + (
            0.5 * temp1 * betao * x3thm1
            + 0.0625 * temp2 * betao * (13.0 - 78.0 * theta2 + 137.0 * theta4)
        )
        x1m5th = 1.0 - 5.0 * theta2
        self._omgdot = (
            -0.5 * temp1 * x1m5th
            + 0.0625 * temp2 * (7.0 - 114.0 * theta2 + 395.0 * theta4)
            + temp3 * (3.0 - 36.0 * theta2 + 49.0 * theta4)
        )
        xhdot1 = -temp1 * cos_io
        self._xnodot = xhdot1 + (
            0.5 * temp2 * (4.0 - 19.0 * theta2) + 2.0 * temp3 * (3.0 - 7.0 * theta2)
        ) * cos_io

        if eo > ECC_ALL:
            self._xmcof = (-TOTHRD * AE) * coef * bstar / eeta

        self._xnodcf = 3.5 * betao2 * xhdot1 * c1
        self._t2cof = 1.5 * c1

        temp0 = 1.0 + cos_io
        if abs(temp0) < EPS_COSIO:
            temp0 = _sign(EPS_COSIO, temp0)
        self._xlcof = 0.125 * A3OVK2 * sin_io * (3.0 + 5.0 * cos_io) / temp0
        self._aycof = 0.25 * A3OVK2 * sin_io

        self._delmo = (1.0 + eta * math.cos(self._xmo)) ** 3

        if mode == Mode.NEAR_NORM:
            c1sq = c1 * c1
            self._d2 = d2 = 4.0 * aodp * tsi * c1sq
            temp0 = d2 * tsi * c1 / 3.0
            self._d3 = d3 = (17.0 * aodp + s4) * temp0
            self._d4 = d4 = 0.5 * temp0 * aodp * tsi * (221.0 * aodp + 31.0 * s4) * c1
            self._t3cof = d2 + 2.0 * c1sq
            self._t4cof = 0.25 * (3.0 * d3 + c1 * (12.0 * d2 + 10.0 * c1sq))
            self._t5cof = 0.2 * (
                3.0 * d4 + 12.0 * c1 * d3 + 6.0 * d2 * d2
                + 15.0 * c1sq * (2.0 * d2 + c1sq)
            )

    def propagate(self, tsince: float, withvel: bool = True) -> Kepler:
        """Keplerian state at tsince minutes from epoch."""
        ts = tsince
        aodp, xnodp = self._aodp, self._xnodp
        em = self._eo
        xinc = self._xincl
        bstar = self._bstar

        xmp = self._xmo + self._xmdot * ts
        xnode = self._xnodeo + ts * (self._xnodot + ts * self._xnodcf)
        omega = self._omegao + self._omgdot * ts

        if self.mode == Mode.ZERO_ECC:
            radius = aodp * XKMPER / AE
            return Kepler(
                radius=radius,
                smjaxs=radius,
                theta=math.fmod(math.pi + xnodp * ts, TWOPI) - math.pi,
                eqinc=self._xincl,
                ascn=self._xnodeo,
                argp=0.0,
                ecc=0.0,
                rfdotk=aodp * xnodp * _VEL_SCALE if withvel else 0.0,
            )
        if self.mode == Mode.NEAR_SIMP:
            tempa = 1.0 - ts * self._c1
            tempe = bstar * ts * self._c4
            templ = ts * ts * self._t2cof
        elif self.mode == Mode.NEAR_NORM:
            delm = self._xmcof * ((1.0 + self._eta * math.cos(xmp)) ** 3 - self._delmo)
            temp0 = ts * self._omgcof + delm
            xmp += temp0
            omega -= temp0
            tempa = 1.0 - ts * (self._c1 + ts * (self._d2 + ts * (self._d3 + ts * self._d4)))
            tempe = bstar * (self._c4 * ts + self._c5 * (math.sin(xmp) - self._sin_xmo))
            templ = ts * ts * (
                self._t2cof + ts * (self._t3cof + ts * (self._t4cof + ts * self._t5cof))
            )
        else:
            raise SGDP4Error("Orbit not initialised")

        a = aodp * tempa * tempa
        e = em - tempe
        xl = xmp + omega + xnode + xnodp * templ

        if a < 1.0:
            raise SGDP4Error(
                f"Satellite {self.satno:05d} crashed at {ts:.3f} (a = {a:.3f} Earth radii)"
            )
        if e < ECC_LIMIT_LOW:
            raise SGDP4Error(
                f"Satellite {self.satno:05d} modified eccentricity too low "
                f"(ts = {ts:.3f}, e = {e:e} < {ECC_LIMIT_LOW:e})"
            )
        if e < ECC_EPS:
            e = ECC_EPS
        elif e > ECC_LIMIT_HIGH:
            e = ECC_LIMIT_HIGH

        beta2 = 1.0 - e * e
        sin_omg, cos_omg = math.sin(omega), math.cos(omega)
        temp0 = 1.0 / (a * beta2)
        axn = e * cos_omg
        ayn = e * sin_omg + temp0 * self._aycof
        xlt = xl + temp0 * self._xlcof * axn

        elsq = axn * axn + ayn * ayn
        if elsq >= 1.0:
            raise SGDP4Error(
                f"SQR(e) >= 1 ({elsq:.3f} at tsince = {ts:.3f} for sat {self.satno:05d})"
            )
        ecc = math.sqrt(elsq)

        epw = capu = math.fmod(xlt - xnode, TWOPI)
        maxnr = ecc
        sin_epw = cos_epw = ecos_e = esin_e = 0.0
        for ii in range(MAXI):
            sin_epw, cos_epw = math.sin(epw), math.cos(epw)
            ecos_e = axn * cos_epw + ayn * sin_epw
            esin_e = axn * sin_epw - ayn * cos_epw
            f = capu - epw + esin_e
            if abs(f) < NR_EPS:
                break
            df = 1.0 - ecos_e
            nr = f / df
            if ii == 0 and abs(nr) > 1.25 * maxnr:
                nr = _sign(maxnr, nr)
            else:
                nr = f / (df + 0.5 * esin_e * nr)
            epw += nr

        temp0 = 1.0 - elsq
        betal = math.sqrt(temp0)
        pl = a * temp0
        r = a * (1.0 - ecos_e)
        inv_r = 1.0 / r
        temp2 = a * inv_r
        temp3 = 1.0 / (1.0 + betal)
        cosu = temp2 * (cos_epw - axn + ayn * esin_e * temp3)
        sinu = temp2 * (sin_epw - ayn - axn * esin_e * temp3)
        u = math.atan2(sinu, cosu)
        sin2u = 2.0 * sinu * cosu
        cos2u = 2.0 * cosu * cosu - 1.0
        temp0 = 1.0 / pl
        temp1 = CK2 * temp0
        temp2 = temp1 * temp0

        cos_io, sin_io = self._cos_io, self._sin_io
        rk = r * (1.0 - 1.5 * temp2 * betal * self._x3thm1) + 0.5 * temp1 * self._x1mth2 * cos2u
        uk = u - 0.25 * temp2 * self._x7thm1 * sin2u
        xnodek = xnode + 1.5 * temp2 * cos_io * sin2u
        xinck = xinc + 1.5 * temp2 * cos_io * sin_io * cos2u

        if rk < 1.0:
            raise SGDP4Error(
                f"Satellite {self.satno:05d} crashed at {ts:.3f} (rk = {rk:.3f} Earth radii)"
            )

        kep = Kepler(
            radius=rk * XKMPER / AE,
            theta=uk,
            eqinc=xinck,
            ascn=xnodek,
            argp=omega,
            smjaxs=a * XKMPER / AE,
            ecc=ecc,
        )
        if withvel:
            sqrt_a = math.sqrt(a)
            temp2 = XKE / (a * sqrt_a)
            kep.rdotk = (
                XKE * sqrt_a * esin_e * inv_r - temp2 * temp1 * self._x1mth2 * sin2u
            ) * _VEL_SCALE
            kep.rfdotk = (
                XKE * math.sqrt(pl) * inv_r
                + temp2 * temp1 * (self._x1mth2 * cos2u + 1.5 * self._x3thm1)
            ) * _VEL_SCALE
        return kep

    def position(self, jd: float, withvel: bool = True) -> tuple[Vector, Vector]:
        """Position (km) and velocity (km/s) at Julian date jd.

        Without velocity terms the returned velocity is zero.
        """
        tsince = (jd - self.jd0) * XMNPDA
        return kep2xyz(self.propagate(tsince, withvel))