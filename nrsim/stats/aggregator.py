"""
Flow statistics aggregation for 5G NR simulations.

This module reduces the raw per-flow counters reported after a run into
per-flow KPIs (throughput, mean delay, loss rate) and network-wide KPIs
(mean throughput, mean delay, packet loss rate, Jain's fairness index).

Network KPIs are computed over contributing flows only, i.e. well-formed
flows that received at least one packet. Values that cannot be computed
("no data") are reported as NaN.
"""

import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from ..core.errors import MalformedRecord
from .records import RawFlowRecord

logger = logging.getLogger(__name__)

NO_DATA = float('nan')


class FlowStatus(Enum):
    """How a flow's KPIs were obtained"""
    OK = "ok"
    NO_PACKETS = "no_packets"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class FlowKPI:
    """KPIs of one flow"""
    record: RawFlowRecord
    throughput_mbps: float
    mean_delay_ms: float
    loss_rate_percent: float
    offered_mbps: float
    status: FlowStatus

    @property
    def flow_id(self) -> int:
        return self.record.flow_id

    @property
    def contributing(self) -> bool:
        return self.status is FlowStatus.OK


@dataclass(frozen=True)
class NetworkKPI:
    """KPIs over all contributing flows of a run"""
    mean_throughput_mbps: float
    mean_delay_ms: float
    packet_loss_rate_percent: float
    fairness_index: float
    total_flows: int
    contributing_flows: int

    @property
    def has_data(self) -> bool:
        return self.contributing_flows > 0


@dataclass(frozen=True)
class AggregationResult:
    """Per-flow and network KPIs of one run"""
    flow_kpis: Tuple[FlowKPI, ...]
    network: NetworkKPI
    flow_duration: float  # seconds

    @property
    def malformed_flows(self) -> List[int]:
        return [kpi.flow_id for kpi in self.flow_kpis if kpi.status is FlowStatus.MALFORMED]

    def to_dataframe(self) -> pd.DataFrame:
        """Per-flow KPI table, one row per flow in observed order"""
        rows = []
        for kpi in self.flow_kpis:
            record = kpi.record
            rows.append({
                'flow_id': record.flow_id,
                'source_address': record.five_tuple.source_address,
                'source_port': record.five_tuple.source_port,
                'destination_address': record.five_tuple.destination_address,
                'destination_port': record.five_tuple.destination_port,
                'protocol': record.five_tuple.protocol_name,
                'tx_packets': record.tx_packets,
                'tx_bytes': record.tx_bytes,
                'rx_packets': record.rx_packets,
                'rx_bytes': record.rx_bytes,
                'offered_mbps': kpi.offered_mbps,
                'throughput_mbps': kpi.throughput_mbps,
                'mean_delay_ms': kpi.mean_delay_ms,
                'loss_rate_percent': kpi.loss_rate_percent,
                'status': kpi.status.value,
            })
        return pd.DataFrame(rows, columns=[
            'flow_id', 'source_address', 'source_port', 'destination_address',
            'destination_port', 'protocol', 'tx_packets', 'tx_bytes', 'rx_packets',
            'rx_bytes', 'offered_mbps', 'throughput_mbps', 'mean_delay_ms',
            'loss_rate_percent', 'status'
        ])

    def network_as_dict(self) -> dict:
        return asdict(self.network)


def jain_fairness_index(throughputs: Iterable[float]) -> float:
    """
    Jain's fairness index ``(sum x)^2 / (n * sum x^2)``.

    Returns 0 for fewer than two flows, which have no fairness to compare,
    and when every throughput is zero.
    """
    x = np.asarray(list(throughputs), dtype=float)
    if x.size <= 1:
        return 0.0
    sum_of_squares = np.sum(x * x)
    if sum_of_squares == 0:
        return 0.0
    return float(np.sum(x) ** 2 / (x.size * sum_of_squares))


def compute_flow_kpi(record: RawFlowRecord, flow_duration: float) -> FlowKPI:
    """
    Compute the KPIs of a single flow.

    Raises:
        MalformedRecord: If the record's counters are inconsistent
    """
    record.validate()
    offered = record.tx_bytes * 8.0 / flow_duration / 1e6

    if record.rx_packets == 0:
        return FlowKPI(record, 0.0, 0.0, 100.0, offered, FlowStatus.NO_PACKETS)

    throughput = record.rx_bytes * 8.0 / flow_duration / 1e6
    delay = 1000 * record.delay_sum / record.rx_packets
    loss_rate = (record.tx_packets - record.rx_packets) * 100.0 / record.tx_packets
    return FlowKPI(record, throughput, delay, loss_rate, offered, FlowStatus.OK)


class StatsAggregator:
    """Reduces a complete flow record snapshot into KPIs."""

    def aggregate(self, records: Sequence[RawFlowRecord], flow_duration: float) -> AggregationResult:
        """
        Aggregate flow records.

        Args:
            records: Flow records, in the order the flows were observed
            flow_duration: Seconds of application traffic

        Returns:
            AggregationResult with one FlowKPI per record, in input order

        Raises:
            ValueError: If flow_duration is not positive
        """
        if flow_duration <= 0:
            raise ValueError(f"Flow duration must be positive, got {flow_duration}")

        flow_kpis = tuple(self._flow_kpi(record, flow_duration) for record in records)
        network = self._network_kpi(flow_kpis, flow_duration)

        if not flow_kpis:
            logger.warning("Empty flow record set, network KPIs have no data")
        elif not network.has_data:
            logger.warning(f"None of {len(flow_kpis)} flows received packets, network KPIs have no data")
        logger.info(f"Aggregated {network.total_flows} flows, {network.contributing_flows} contributing")

        return AggregationResult(flow_kpis=flow_kpis, network=network, flow_duration=flow_duration)

    def _flow_kpi(self, record: RawFlowRecord, flow_duration: float) -> FlowKPI:
        try:
            return compute_flow_kpi(record, flow_duration)
        except MalformedRecord as e:
            logger.warning(f"{e}; reporting no data for this flow")
            return FlowKPI(record, NO_DATA, NO_DATA, NO_DATA, NO_DATA, FlowStatus.MALFORMED)

    def _network_kpi(self, flow_kpis: Sequence[FlowKPI], flow_duration: float) -> NetworkKPI:
        contributing = [kpi for kpi in flow_kpis if kpi.contributing]
        num_flows = len(contributing)

        if num_flows == 0:
            transmitted = any(kpi.record.tx_packets > 0 for kpi in flow_kpis
                              if kpi.status is FlowStatus.NO_PACKETS)
            return NetworkKPI(
                mean_throughput_mbps=NO_DATA,
                mean_delay_ms=NO_DATA,
                packet_loss_rate_percent=100.0 if transmitted else NO_DATA,
                fairness_index=0.0,
                total_flows=len(flow_kpis),
                contributing_flows=0
            )

        rx_bytes = np.array([kpi.record.rx_bytes for kpi in contributing], dtype=float)
        rx_packets = np.array([kpi.record.rx_packets for kpi in contributing], dtype=float)
        tx_packets = np.array([kpi.record.tx_packets for kpi in contributing], dtype=float)
        delay_sums = np.array([kpi.record.delay_sum for kpi in contributing], dtype=float)

        mean_throughput = rx_bytes.sum() * 8.0 / (flow_duration * num_flows) / 1e6
        mean_delay = delay_sums.sum() / rx_packets.sum() * 1000
        loss_rate = (tx_packets - rx_packets).sum() * 100.0 / tx_packets.sum()

        return NetworkKPI(
            mean_throughput_mbps=float(mean_throughput),
            mean_delay_ms=float(mean_delay),
            packet_loss_rate_percent=float(loss_rate),
            fairness_index=jain_fairness_index(kpi.throughput_mbps for kpi in contributing),
            total_flows=len(flow_kpis),
            contributing_flows=num_flows
        )


def aggregate(records: Sequence[RawFlowRecord], flow_duration: float) -> AggregationResult:
    """Aggregate flow records with the default aggregator"""
    return StatsAggregator().aggregate(records, flow_duration)
