"""Distances in a Friedmann-Lemaitre-Robertson-Walker cosmology.

Radiation is ignored; the comoving distance integral is evaluated with the
trapezoidal rule.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

__all__ = ["Cosmo", "PLANCK15", "PLANCK18", "WMAP9"]

SPEED_OF_LIGHT_KM_S = 299792.458
INTEGRATION_STEPS = 1000


def _check_redshift(z: float) -> None:
    if not (math.isfinite(z) and z >= 0.0):
        raise ValueError(f"Redshift must be finite and non-negative: {z}")


@dataclass(frozen=True)
class Cosmo:
    """Cosmological parameters; ``h0`` is in km/s/Mpc, distances are in Mpc."""

    h0: float
    omega_m: float
    omega_lambda: float
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.h0 > 0.0:
            raise ValueError(f"Hubble constant must be positive: {self.h0}")

    @classmethod
    def planck18(cls) -> Cosmo:
        return PLANCK18

    @classmethod
    def planck15(cls) -> Cosmo:
        return PLANCK15

    @classmethod
    def wmap9(cls) -> Cosmo:
        return WMAP9

    @property
    def omega_k(self) -> float:
        return 1.0 - self.omega_m - self.omega_lambda

    @property
    def hubble_distance(self) -> float:
        return SPEED_OF_LIGHT_KM_S / self.h0

    def efunc(self, z):
        """Dimensionless Hubble parameter E(z) = H(z) / H0."""

        zp1 = 1.0 + np.asarray(z, dtype=float)
        return np.sqrt(
            self.omega_m * zp1**3 + self.omega_k * zp1**2 + self.omega_lambda
        )

    def comoving_distance(self, z: float) -> float:
        """Line-of-sight comoving distance."""

        _check_redshift(z)
        if z == 0.0:
            return 0.0
        grid = np.linspace(0.0, z, INTEGRATION_STEPS + 1)
        values = 1.0 / self.efunc(grid)
        step = z / INTEGRATION_STEPS
        integral = step * (values.sum() - 0.5 * (values[0] + values[-1]))
        return self.hubble_distance * float(integral)

    def transverse_comoving_distance(self, z: float) -> float:
        distance = self.comoving_distance(z)
        omega_k = self.omega_k
        if abs(omega_k) < 1e-10:
            return distance
        d_h = self.hubble_distance
        root = math.sqrt(abs(omega_k))
        if omega_k > 0.0:
            return d_h / root * math.sinh(root * distance / d_h)
        return d_h / root * math.sin(root * distance / d_h)

    def luminosity_distance(self, z: float) -> float:
        return (1.0 + z) * self.transverse_comoving_distance(z)

    def angular_diameter_distance(self, z: float) -> float:
        return self.transverse_comoving_distance(z) / (1.0 + z)

    def distance_modulus(self, z: float) -> float:
        """5 log10(D_L / 10 pc)."""

        distance = self.luminosity_distance(z)
        if distance <= 0.0:
            raise ValueError(f"Distance modulus is undefined at z={z}")
        return 5.0 * math.log10(distance * 1.0e6 / 10.0)

    dm = distance_modulus

    def __str__(self) -> str:
        label = self.name or "Cosmo"
        return f"{label}(H0={self.h0}, Om={self.omega_m}, Ode={self.omega_lambda})"


PLANCK18 = Cosmo(67.66, 0.3103, 0.6897, "Planck18")
PLANCK15 = Cosmo(67.74, 0.3075, 0.6910, "Planck15")
WMAP9 = Cosmo(69.32, 0.2865, 0.7134, "WMAP9")
