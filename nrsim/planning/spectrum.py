"""
Spectrum and transmit power partitioning across operation bands.

The total bandwidth of the active bands is split proportionally and each band
gets a share of the cell's transmit power budget in the same proportion.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from ..core.config import BandConfig
from ..core.errors import InvalidFrequency, ScenarioError

logger = logging.getLogger(__name__)

MIN_FREQUENCY = 0.5e9  # Hz
MAX_FREQUENCY = 100e9  # Hz

# Power budget scaling: budget = POWER_SCALING_BASE ** (P_dBm / POWER_SCALING_DIVISOR)
POWER_SCALING_BASE = 20.0
POWER_SCALING_DIVISOR = 5.0


@dataclass(frozen=True)
class BandPlan:
    """Bandwidth share and per-cell transmit power of one active band"""
    band_index: int
    center_frequency: float  # Hz
    bandwidth: float  # Hz
    numerology: int
    band_share: float
    tx_power: float  # dBm

    def as_dict(self) -> dict:
        return {
            'band_index': self.band_index,
            'center_frequency': self.center_frequency,
            'bandwidth': self.bandwidth,
            'numerology': self.numerology,
            'band_share': self.band_share,
            'tx_power_dbm': self.tx_power,
        }


@dataclass(frozen=True)
class SpectrumPlan:
    """Per-band split of the total bandwidth and power budget"""
    bands: Tuple[BandPlan, ...]
    total_bandwidth: float  # Hz
    linear_power_budget: float

    @property
    def share_sum(self) -> float:
        return float(sum(band.band_share for band in self.bands))

    def get_band(self, band_index: int) -> BandPlan:
        for band in self.bands:
            if band.band_index == band_index:
                return band
        raise KeyError(f"Band {band_index} is not active in this plan")

    def as_dict(self) -> dict:
        return {
            'total_bandwidth': self.total_bandwidth,
            'linear_power_budget': self.linear_power_budget,
            'bands': [band.as_dict() for band in self.bands],
        }


def validate_frequencies(bands: Sequence[BandConfig],
                         min_frequency: float = MIN_FREQUENCY,
                         max_frequency: float = MAX_FREQUENCY):
    """
    Check every configured band against the supported carrier range.

    Raises:
        InvalidFrequency: For the first band outside [min_frequency, max_frequency]
    """
    for index, band in enumerate(bands):
        if band.center_frequency < min_frequency or band.center_frequency > max_frequency:
            raise InvalidFrequency(index, band.center_frequency, min_frequency, max_frequency)


def linear_power_budget(total_tx_power: float) -> float:
    """
    Scale a total transmit power in dBm to the linear budget split across bands.

    Note that this is ``20 ** (P / 5)`` and not the standard dBm to milliwatt
    conversion ``10 ** (P / 10)``. Per-band powers keep this scaling so that
    existing scenarios plan the same powers.
    """
    return POWER_SCALING_BASE ** (total_tx_power / POWER_SCALING_DIVISOR)


def plan_spectrum(active_bands: Sequence[BandConfig], total_tx_power: float) -> SpectrumPlan:
    """
    Split bandwidth and transmit power over the active bands.

    Args:
        active_bands: Bands in use, in BWP order
        total_tx_power: Total transmit power budget per cell in dBm

    Returns:
        SpectrumPlan with one BandPlan per active band
    """
    if not active_bands:
        raise ScenarioError("At least one operation band is required")

    bandwidths = np.array([band.bandwidth for band in active_bands], dtype=float)
    if np.any(bandwidths <= 0):
        raise ScenarioError(f"Band bandwidths must be positive, got {bandwidths.tolist()}")

    total_bandwidth = float(bandwidths.sum())
    budget = linear_power_budget(total_tx_power)

    shares = bandwidths / total_bandwidth
    powers = 10 * np.log10(shares * budget)

    band_plans: List[BandPlan] = []
    for index, band in enumerate(active_bands):
        band_plans.append(BandPlan(
            band_index=index,
            center_frequency=band.center_frequency,
            bandwidth=band.bandwidth,
            numerology=band.numerology,
            band_share=float(shares[index]),
            tx_power=float(powers[index])
        ))
        logger.debug(f"Band {index}: {band.bandwidth / 1e6:g} MHz at {band.center_frequency / 1e9:g} GHz, "
                     f"share {shares[index]:.3f}, {powers[index]:.2f} dBm")

    return SpectrumPlan(
        bands=tuple(band_plans),
        total_bandwidth=total_bandwidth,
        linear_power_budget=budget
    )
