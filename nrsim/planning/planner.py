"""
Scenario planner for 5G NR network simulations.

Turns a ScenarioConfig into the values the simulator needs before the run:
the per-band spectrum and power split, the per-cell PHY settings, the
terminal attachment and one dedicated bearer per traffic class. The planner
is a pure function of its configuration and never touches simulator state.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..core.config import ScenarioConfig
from ..core.errors import ScenarioError
from ..qos.bearer import BearerTFT, build_bearers
from .attachment import AttachmentMap, assign_traffic_classes, round_robin_attachment, terminals_per_cell
from .spectrum import MIN_FREQUENCY, SpectrumPlan, plan_spectrum, validate_frequencies

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellPlan:
    """PHY settings applied to one cell"""
    cell_index: int
    position: Optional[Tuple[float, float, float]]
    numerologies: Tuple[int, ...]  # per active band
    tx_powers: Tuple[float, ...]  # dBm, per active band

    def as_dict(self) -> Dict:
        return {
            'cell_index': self.cell_index,
            'position': list(self.position) if self.position is not None else None,
            'numerologies': list(self.numerologies),
            'tx_powers_dbm': list(self.tx_powers),
        }


@dataclass(frozen=True)
class ScenarioPlan:
    """Everything derived from a scenario before the simulation starts"""
    spectrum: SpectrumPlan
    cells: Tuple[CellPlan, ...]
    attachment: AttachmentMap
    terminal_classes: Dict[int, str]
    bearers: Tuple[BearerTFT, ...]
    scheduler: str
    flow_duration: float  # seconds

    def bearer_for(self, terminal: int) -> BearerTFT:
        """Bearer that carries a terminal's downlink traffic"""
        name = self.terminal_classes[terminal]
        for bearer in self.bearers:
            if bearer.traffic_class == name:
                return bearer
        raise KeyError(f"No bearer for traffic class '{name}'")

    def as_dict(self) -> Dict:
        return {
            'spectrum': self.spectrum.as_dict(),
            'cells': [cell.as_dict() for cell in self.cells],
            'attachment': {str(ue): cell for ue, cell in self.attachment.items()},
            'terminal_classes': {str(ue): name for ue, name in self.terminal_classes.items()},
            'bearers': [bearer.as_dict() for bearer in self.bearers],
            'scheduler': self.scheduler,
            'flow_duration': self.flow_duration,
        }


class ScenarioPlanner:
    """Derives spectrum, power, attachment and bearer plans from a scenario."""

    def __init__(self, min_frequency: float = MIN_FREQUENCY):
        self.min_frequency = min_frequency

    def plan(self, config: ScenarioConfig) -> ScenarioPlan:
        """
        Plan a scenario.

        Args:
            config: Scenario parameters

        Returns:
            ScenarioPlan to configure the simulator with

        Raises:
            InvalidFrequency: If a band's center frequency is out of range
            DuplicatePort: If two traffic classes share a port
            ScenarioError: If the scenario is otherwise inconsistent
        """
        # Frequencies first, everything below assumes physical band values
        validate_frequencies(config.bands, self.min_frequency, config.max_frequency)
        self._validate(config)

        active_bands = config.active_bands
        spectrum = plan_spectrum(active_bands, config.total_tx_power)

        numerologies = tuple(band.numerology for band in spectrum.bands)
        tx_powers = tuple(band.tx_power for band in spectrum.bands)
        cells = tuple(
            CellPlan(
                cell_index=cell,
                position=tuple(config.cell_positions[cell]) if config.cell_positions else None,
                numerologies=numerologies,
                tx_powers=tx_powers
            )
            for cell in range(config.num_cells)
        )

        attachment = round_robin_attachment(config.num_terminals, config.num_cells)
        bearers = tuple(build_bearers(config.traffic_classes, num_bwps=len(active_bands)))
        terminal_classes = assign_traffic_classes(
            config.num_terminals, [tc.name for tc in config.traffic_classes]
        )

        logger.info(f"Planned {config.num_cells} cells, {config.num_terminals} terminals, "
                    f"{len(spectrum.bands)} band(s) over {spectrum.total_bandwidth / 1e6:g} MHz, "
                    f"{len(bearers)} bearer(s)")
        for cell, terminals in terminals_per_cell(attachment, config.num_cells).items():
            logger.debug(f"Cell {cell} serves terminals {terminals}")

        return ScenarioPlan(
            spectrum=spectrum,
            cells=cells,
            attachment=attachment,
            terminal_classes=terminal_classes,
            bearers=bearers,
            scheduler=config.scheduler,
            flow_duration=config.flow_duration
        )

    def _validate(self, config: ScenarioConfig):
        """Check structural scenario parameters"""
        if config.num_cells < 1:
            raise ScenarioError(f"At least one cell is required, got {config.num_cells}")
        if config.num_terminals < 1:
            raise ScenarioError(f"At least one terminal is required, got {config.num_terminals}")
        if not 1 <= len(config.bands) <= 2:
            raise ScenarioError(f"One or two operation bands are supported, got {len(config.bands)}")
        if config.double_operational_band and len(config.bands) < 2:
            raise ScenarioError("Dual-band operation needs a second band")
        if not config.traffic_classes:
            raise ScenarioError("At least one traffic class is required")
        if config.cell_positions is not None and len(config.cell_positions) != config.num_cells:
            raise ScenarioError(f"Got {len(config.cell_positions)} cell positions for {config.num_cells} cells")
        if config.flow_duration <= 0:
            raise ScenarioError("Application start time must be before the end of the simulation")


def plan(config: ScenarioConfig) -> ScenarioPlan:
    """Plan a scenario with the default planner"""
    return ScenarioPlanner().plan(config)
