"""
Configuration classes for the scenario planner
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ..qos.qci_mapping import QosClass


@dataclass(frozen=True)
class BandConfig:
    """Operation band with a single component carrier and bandwidth part"""
    center_frequency: float  # Hz
    bandwidth: float  # Hz
    numerology: int = 0


@dataclass(frozen=True)
class TrafficClassConfig:
    """Downlink UDP traffic class carried on its own dedicated bearer"""
    name: str
    port: int
    qos_class: QosClass
    packet_size: int = 512  # bytes
    lambda_pps: int = 10000


@dataclass(frozen=True)
class ScenarioConfig:
    """Configuration parameters for a scenario"""
    # Network configuration
    num_cells: int = 3
    num_terminals: int = 5
    cell_positions: Optional[Tuple[Tuple[float, float, float], ...]] = None  # meters
    total_tx_power: float = 55.0  # dBm
    scheduler: str = "ns3::NrMacSchedulerTdmaRR"
    max_frequency: float = 100e9  # Hz

    # Spectrum configuration
    bands: Tuple[BandConfig, ...] = (
        BandConfig(center_frequency=28e9, bandwidth=400e6, numerology=3),
        BandConfig(center_frequency=28.2e9, bandwidth=400e6, numerology=2),
    )
    double_operational_band: bool = True

    # Traffic configuration
    traffic_classes: Tuple[TrafficClassConfig, ...] = (
        TrafficClassConfig(name="low_latency", port=1236, qos_class=QosClass.NGBR_LOW_LAT_EMBB),
    )

    # Run configuration
    simulation_time: float = 60.0  # seconds
    app_start_time: float = 0.1  # seconds
    log_level: str = "INFO"
    output_directory: str = "results"
    enable_plots: bool = False

    @property
    def active_bands(self) -> Tuple[BandConfig, ...]:
        """Bands the plan covers: the first, plus the second in dual-band mode"""
        if self.double_operational_band:
            return self.bands[:2]
        return self.bands[:1]

    @property
    def flow_duration(self) -> float:
        """Seconds of application traffic, used to turn byte counts into rates"""
        return self.simulation_time - self.app_start_time
