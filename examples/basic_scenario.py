#!/usr/bin/env python3
"""
Basic 5G NR Scenario Example

This script demonstrates planning a dual-band voice scenario and reducing a
set of flow records, as the simulator would report them after the run, into
the KPI report.
"""

import sys
import os
import logging

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nrsim.core.config import ScenarioConfig, BandConfig, TrafficClassConfig
from nrsim.planning.planner import ScenarioPlanner
from nrsim.qos.qci_mapping import QCIMapping, QosClass
from nrsim.stats.aggregator import StatsAggregator
from nrsim.stats.records import FiveTuple, RawFlowRecord
from nrsim.stats.report import print_report


def main():
    """Run basic scenario example"""

    # Setup logging
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    logger.info("Starting basic 5G NR scenario example")

    # Create configuration
    config = ScenarioConfig(
        num_cells=3,
        num_terminals=5,
        cell_positions=((30.0, 50.0, 10.0), (50.0, 50.0, 10.0), (70.0, 50.0, 10.0)),
        total_tx_power=55.0,
        bands=(
            BandConfig(center_frequency=28e9, bandwidth=100e6, numerology=4),
            BandConfig(center_frequency=28.2e9, bandwidth=100e6, numerology=2),
        ),
        double_operational_band=True,
        traffic_classes=(
            TrafficClassConfig(name="voice", port=1235, qos_class=QosClass.GBR_CONV_VOICE,
                               packet_size=1024),
        )
    )

    qos = QCIMapping.get_qos_characteristics(QosClass.GBR_CONV_VOICE)
    logger.info(f"Voice bearer: 5QI {QosClass.GBR_CONV_VOICE.value}, Priority={qos.priority_level}, "
                f"Delay Budget={qos.packet_delay_budget}ms, PER={qos.packet_error_rate}")

    plan = ScenarioPlanner().plan(config)
    for band in plan.spectrum.bands:
        logger.info(f"  Band {band.band_index}: share {band.band_share:.2f}, {band.tx_power:.2f} dBm")
    logger.info(f"  Attachment: {plan.attachment}")

    # Counters as the flow monitor would report them for a 59.9 s run
    records = [
        RawFlowRecord(
            flow_id=i + 1,
            five_tuple=FiveTuple("1.0.0.2", 49153, f"7.0.0.{i + 2}", 1235, 17),
            tx_packets=120,
            tx_bytes=120 * 1052,
            rx_packets=120 - i * 10,
            rx_bytes=(120 - i * 10) * 1052,
            delay_sum=(120 - i * 10) * 0.0015
        )
        for i in range(config.num_terminals)
    ]

    result = StatsAggregator().aggregate(records, plan.flow_duration)
    print_report(result)

    logger.info("Basic scenario example completed successfully!")


if __name__ == "__main__":
    main()
