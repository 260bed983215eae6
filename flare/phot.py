"""Conversions between magnitudes and fluxes.

With the default zero point of 23.9 fluxes are in microjanskys. All functions
accept scalars or numpy arrays.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

__all__ = [
    "ZP",
    "flux_to_mag",
    "fluxerr_to_limmag",
    "limmag_to_fluxerr",
    "mag_to_flux",
]

ZP = 23.9
FACTOR = 2.5 / np.log(10.0)  # 1.0857362047581294


def mag_to_flux(mag, magerr, zp: float = ZP) -> Tuple[np.ndarray, np.ndarray]:
    flux = np.power(10.0, -0.4 * (np.asarray(mag, dtype=float) - zp))
    fluxerr = np.asarray(magerr, dtype=float) / FACTOR * flux
    return flux, fluxerr


def flux_to_mag(flux, fluxerr, zp: float = ZP) -> Tuple[np.ndarray, np.ndarray]:
    flux = np.asarray(flux, dtype=float)
    if np.any(flux <= 0.0):
        raise ValueError("flux must be positive to convert to a magnitude")
    mag = zp - 2.5 * np.log10(flux)
    magerr = FACTOR * np.asarray(fluxerr, dtype=float) / flux
    return mag, magerr


def limmag_to_fluxerr(limmag, zp: float = ZP, sigma: float = 5.0) -> np.ndarray:
    """Flux error implied by a ``sigma``-significance limiting magnitude."""

    return np.power(10.0, (np.asarray(limmag, dtype=float) - zp) / -2.5) / sigma


def fluxerr_to_limmag(fluxerr, zp: float = ZP, sigma: float = 5.0) -> np.ndarray:
    fluxerr = np.asarray(fluxerr, dtype=float)
    if np.any(fluxerr <= 0.0):
        raise ValueError("fluxerr must be positive to convert to a limiting magnitude")
    return -2.5 * np.log10(sigma * fluxerr) + zp
