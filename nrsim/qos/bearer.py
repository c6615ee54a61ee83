"""
Dedicated bearer and traffic flow template (TFT) construction.

Every traffic class gets one downlink bearer, shared by all terminals of that
class, whose TFT matches the class's UDP port. Downlink packets are classified
onto bearers by port alone, so no two active TFTs may cover the same port.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..core.errors import DuplicatePort, ScenarioError
from .qci_mapping import QCIMapping, QoSCharacteristics, QosClass, ResourceType

logger = logging.getLogger(__name__)

MAX_PORT = 65535


@dataclass(frozen=True)
class PacketFilter:
    """TFT packet filter on the terminal's local port range"""
    local_port_start: int
    local_port_end: int
    direction: str = "downlink"

    def matches(self, port: int) -> bool:
        """Check whether a destination port falls inside this filter"""
        return self.local_port_start <= port <= self.local_port_end

    def overlaps(self, other: 'PacketFilter') -> bool:
        """Check whether two filters would classify a common port"""
        return (self.direction == other.direction
                and self.local_port_start <= other.local_port_end
                and other.local_port_start <= self.local_port_end)


@dataclass(frozen=True)
class BearerTFT:
    """Dedicated bearer for one traffic class together with its TFT"""
    traffic_class: str
    qos_class: QosClass
    packet_filter: PacketFilter
    bwp_id: int = 0
    packet_size: int = 512  # bytes
    interval: float = 0.5  # seconds between client packets

    @property
    def port_start(self) -> int:
        return self.packet_filter.local_port_start

    @property
    def port_end(self) -> int:
        return self.packet_filter.local_port_end

    @property
    def qos_characteristics(self) -> QoSCharacteristics:
        """Get QoS characteristics for this bearer."""
        return QCIMapping.get_qos_characteristics(self.qos_class)

    def as_dict(self) -> Dict:
        return {
            'traffic_class': self.traffic_class,
            'qos_class': self.qos_class.name,
            'qi_value': self.qos_class.value,
            'port_start': self.port_start,
            'port_end': self.port_end,
            'direction': self.packet_filter.direction,
            'bwp_id': self.bwp_id,
            'packet_size': self.packet_size,
            'interval': self.interval,
        }


class BearerManager:
    """Creates the per-class bearers and keeps their port filters disjoint."""

    def __init__(self):
        self.bearers: Dict[str, BearerTFT] = {}

    def create_bearer(self, traffic_class, bwp_id: int = 0) -> BearerTFT:
        """
        Create the dedicated bearer for a traffic class.

        Args:
            traffic_class: TrafficClassConfig with name, port, qos_class,
                packet_size and lambda_pps
            bwp_id: Bandwidth part the bearer's QoS class is mapped to

        Returns:
            The new BearerTFT

        Raises:
            DuplicatePort: If the port is already covered by another bearer
            ScenarioError: If the class is already defined or its parameters
                are out of range
        """
        name = traffic_class.name
        if not 0 <= traffic_class.port <= MAX_PORT:
            raise ScenarioError(f"Traffic class '{name}' port {traffic_class.port} is not a valid UDP port")

        packet_filter = PacketFilter(traffic_class.port, traffic_class.port)
        for existing in self.bearers.values():
            if existing.packet_filter.overlaps(packet_filter):
                raise DuplicatePort(traffic_class.port, existing.traffic_class, name)

        if name in self.bearers:
            raise ScenarioError(f"Traffic class '{name}' is defined twice")
        if traffic_class.lambda_pps <= 0:
            raise ScenarioError(f"Traffic class '{name}' needs a positive packet rate")

        bearer = BearerTFT(
            traffic_class=name,
            qos_class=QosClass.parse(traffic_class.qos_class),
            packet_filter=packet_filter,
            bwp_id=bwp_id,
            packet_size=traffic_class.packet_size,
            interval=5000.0 / traffic_class.lambda_pps
        )
        self.bearers[name] = bearer
        logger.info(f"Created bearer '{name}' with {bearer.qos_class.name} on port {traffic_class.port}, BWP {bwp_id}")
        return bearer

    def remove_bearer(self, name: str) -> bool:
        """Remove a bearer"""
        if name in self.bearers:
            del self.bearers[name]
            logger.info(f"Removed bearer '{name}'")
            return True
        return False

    def get_bearer(self, name: str) -> Optional[BearerTFT]:
        """Get a bearer by traffic class name"""
        return self.bearers.get(name)

    def classify(self, port: int) -> Optional[BearerTFT]:
        """Find the bearer a downlink packet to ``port`` is carried on"""
        for bearer in self.bearers.values():
            if bearer.packet_filter.matches(port):
                return bearer
        return None

    def get_bearer_summary(self) -> Dict:
        """Get summary of all bearers"""
        resource_types = [b.qos_characteristics.resource_type for b in self.bearers.values()]
        return {
            'total_bearers': len(self.bearers),
            'gbr_bearers': sum(1 for rt in resource_types
                               if rt in [ResourceType.GBR, ResourceType.DELAY_CRITICAL_GBR]),
            'non_gbr_bearers': sum(1 for rt in resource_types if rt == ResourceType.NON_GBR),
            'delay_critical_bearers': sum(1 for rt in resource_types
                                          if rt == ResourceType.DELAY_CRITICAL_GBR)
        }


def build_bearers(traffic_classes, num_bwps: int = 1) -> List[BearerTFT]:
    """
    Build one bearer per traffic class.

    Classes are mapped onto bandwidth parts starting from the last active one,
    so a single class in dual-band mode is carried on BWP 1.

    Raises:
        DuplicatePort: If two classes share a port
    """
    manager = BearerManager()
    return [
        manager.create_bearer(tc, bwp_id=(num_bwps - 1 - index) % num_bwps)
        for index, tc in enumerate(traffic_classes)
    ]
