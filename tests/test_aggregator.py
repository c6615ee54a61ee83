"""
Tests for flow statistics aggregation.
"""

import unittest
import sys
import os
import math

# Add package root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pandas as pd

from nrsim.core.errors import MalformedRecord
from nrsim.stats.aggregator import (
    FlowStatus, StatsAggregator, aggregate, compute_flow_kpi, jain_fairness_index
)
from nrsim.stats.records import FiveTuple, RawFlowRecord


def make_record(flow_id, tx_packets, rx_packets, rx_bytes=None, delay_sum=0.0, packet_size=1000):
    """Build a UDP downlink flow record"""
    return RawFlowRecord(
        flow_id=flow_id,
        five_tuple=FiveTuple("1.0.0.2", 49152 + flow_id, f"7.0.0.{flow_id + 1}", 1236, 17),
        tx_packets=tx_packets,
        tx_bytes=tx_packets * packet_size,
        rx_packets=rx_packets,
        rx_bytes=rx_packets * packet_size if rx_bytes is None else rx_bytes,
        delay_sum=delay_sum
    )


class TestFlowKPI(unittest.TestCase):
    """Test per-flow KPI computation."""

    def test_received_flow(self):
        record = make_record(1, tx_packets=100, rx_packets=80, rx_bytes=80000, delay_sum=0.8)
        kpi = compute_flow_kpi(record, 10.0)
        self.assertEqual(kpi.status, FlowStatus.OK)
        self.assertAlmostEqual(kpi.throughput_mbps, 0.064)
        self.assertAlmostEqual(kpi.mean_delay_ms, 10.0)
        self.assertAlmostEqual(kpi.loss_rate_percent, 20.0)
        self.assertAlmostEqual(kpi.offered_mbps, 0.08)
        self.assertTrue(kpi.contributing)

    def test_no_packets_received(self):
        kpi = compute_flow_kpi(make_record(1, tx_packets=100, rx_packets=0), 10.0)
        self.assertEqual(kpi.status, FlowStatus.NO_PACKETS)
        self.assertEqual(kpi.throughput_mbps, 0.0)
        self.assertEqual(kpi.mean_delay_ms, 0.0)
        self.assertEqual(kpi.loss_rate_percent, 100.0)
        self.assertFalse(kpi.contributing)

    def test_malformed_record(self):
        with self.assertRaises(MalformedRecord):
            compute_flow_kpi(make_record(1, tx_packets=0, rx_packets=5), 10.0)
        with self.assertRaises(MalformedRecord):
            compute_flow_kpi(make_record(1, tx_packets=10, rx_packets=5, delay_sum=-1.0), 10.0)


class TestJainFairness(unittest.TestCase):
    """Test Jain's fairness index."""

    def test_equal_throughputs(self):
        self.assertEqual(jain_fairness_index([2.0, 2.0, 2.0, 2.0]), 1.0)

    def test_unequal_throughputs(self):
        self.assertAlmostEqual(jain_fairness_index([1.0, 3.0]), 0.8)

    def test_degenerate_inputs(self):
        self.assertEqual(jain_fairness_index([]), 0.0)
        self.assertEqual(jain_fairness_index([5.0]), 0.0)
        self.assertEqual(jain_fairness_index([0.0, 0.0]), 0.0)


class TestStatsAggregator(unittest.TestCase):
    """Test network KPI aggregation."""

    def setUp(self):
        self.aggregator = StatsAggregator()

    def test_single_flow_without_packets(self):
        result = self.aggregator.aggregate([make_record(1, tx_packets=100, rx_packets=0)], 10.0)
        flow = result.flow_kpis[0]
        self.assertEqual((flow.throughput_mbps, flow.mean_delay_ms, flow.loss_rate_percent), (0.0, 0.0, 100.0))

        network = result.network
        self.assertTrue(math.isnan(network.mean_throughput_mbps))
        self.assertTrue(math.isnan(network.mean_delay_ms))
        self.assertEqual(network.packet_loss_rate_percent, 100.0)
        self.assertEqual(network.fairness_index, 0.0)
        self.assertEqual(network.total_flows, 1)
        self.assertEqual(network.contributing_flows, 0)
        self.assertFalse(network.has_data)

    def test_network_kpis(self):
        records = [
            make_record(1, tx_packets=100, rx_packets=80, rx_bytes=80000, delay_sum=0.8),
            make_record(2, tx_packets=50, rx_packets=50, rx_bytes=50000, delay_sum=0.25),
            make_record(3, tx_packets=10, rx_packets=0),
        ]
        result = self.aggregator.aggregate(records, 10.0)
        network = result.network

        self.assertEqual(network.total_flows, 3)
        self.assertEqual(network.contributing_flows, 2)
        self.assertAlmostEqual(network.mean_throughput_mbps, 130000 * 8 / (10.0 * 2) / 1e6)
        self.assertAlmostEqual(network.mean_delay_ms, 1.05 / 130 * 1000)
        self.assertAlmostEqual(network.packet_loss_rate_percent, 20 * 100 / 150)
        self.assertAlmostEqual(network.fairness_index, jain_fairness_index([0.064, 0.04]))

    def test_equal_flows_are_fair(self):
        records = [make_record(i, tx_packets=10, rx_packets=10, rx_bytes=1000, delay_sum=0.01)
                   for i in range(1, 5)]
        result = self.aggregator.aggregate(records, 10.0)
        self.assertAlmostEqual(result.network.fairness_index, 1.0)

    def test_three_to_one_fairness(self):
        records = [
            make_record(1, tx_packets=10, rx_packets=10, rx_bytes=1000),
            make_record(2, tx_packets=30, rx_packets=30, rx_bytes=3000),
        ]
        result = self.aggregator.aggregate(records, 10.0)
        self.assertAlmostEqual(result.network.fairness_index, 0.8)

    def test_malformed_flow_is_excluded(self):
        records = [
            make_record(1, tx_packets=100, rx_packets=100, delay_sum=0.5),
            make_record(2, tx_packets=0, rx_packets=5),
        ]
        with self.assertLogs('nrsim.stats.aggregator', level='WARNING'):
            result = self.aggregator.aggregate(records, 10.0)

        malformed = result.flow_kpis[1]
        self.assertEqual(malformed.status, FlowStatus.MALFORMED)
        self.assertTrue(math.isnan(malformed.throughput_mbps))
        self.assertEqual(result.malformed_flows, [2])
        self.assertEqual(result.network.total_flows, 2)
        self.assertEqual(result.network.contributing_flows, 1)
        self.assertAlmostEqual(result.network.packet_loss_rate_percent, 0.0)

    def test_empty_record_set(self):
        with self.assertLogs('nrsim.stats.aggregator', level='WARNING'):
            result = self.aggregator.aggregate([], 10.0)
        network = result.network
        self.assertEqual(result.flow_kpis, ())
        self.assertTrue(math.isnan(network.mean_throughput_mbps))
        self.assertTrue(math.isnan(network.mean_delay_ms))
        self.assertTrue(math.isnan(network.packet_loss_rate_percent))
        self.assertEqual(network.fairness_index, 0.0)
        self.assertEqual(network.total_flows, 0)

    def test_idle_flows_have_no_loss_rate(self):
        result = self.aggregator.aggregate([make_record(1, tx_packets=0, rx_packets=0)], 10.0)
        self.assertTrue(math.isnan(result.network.packet_loss_rate_percent))

    def test_invalid_flow_duration(self):
        records = [make_record(1, tx_packets=10, rx_packets=10)]
        with self.assertRaises(ValueError):
            self.aggregator.aggregate(records, 0.0)
        with self.assertRaises(ValueError):
            self.aggregator.aggregate(records, -1.0)

    def test_observed_order(self):
        records = [make_record(i, tx_packets=10, rx_packets=i) for i in (3, 1, 2)]
        result = aggregate(records, 10.0)
        self.assertEqual([kpi.flow_id for kpi in result.flow_kpis], [3, 1, 2])

    def test_aggregation_is_repeatable(self):
        records = [
            make_record(1, tx_packets=100, rx_packets=80, delay_sum=0.8),
            make_record(2, tx_packets=100, rx_packets=0),
        ]
        first = self.aggregator.aggregate(records, 59.9)
        second = self.aggregator.aggregate(records, 59.9)
        self.assertEqual(first, second)
        pd.testing.assert_frame_equal(first.to_dataframe(), second.to_dataframe())

    def test_to_dataframe(self):
        records = [
            make_record(1, tx_packets=100, rx_packets=80, delay_sum=0.8),
            make_record(2, tx_packets=0, rx_packets=5),
        ]
        df = self.aggregator.aggregate(records, 10.0).to_dataframe()
        self.assertEqual(len(df), 2)
        self.assertEqual(list(df['status']), ['ok', 'malformed'])
        self.assertEqual(df.loc[0, 'protocol'], 'UDP')
        self.assertTrue(math.isnan(df.loc[1, 'throughput_mbps']))

    def test_network_as_dict(self):
        result = self.aggregator.aggregate([make_record(1, tx_packets=10, rx_packets=10)], 10.0)
        data = result.network_as_dict()
        self.assertEqual(data['contributing_flows'], 1)
        self.assertIn('fairness_index', data)


if __name__ == '__main__':
    unittest.main()
