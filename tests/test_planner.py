"""
Tests for scenario planning.
"""

import unittest
import sys
import os
import math
from dataclasses import replace

# Add package root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from nrsim.core.config import ScenarioConfig, BandConfig, TrafficClassConfig
from nrsim.core.errors import DuplicatePort, InvalidFrequency, ScenarioError
from nrsim.planning.attachment import assign_traffic_classes, round_robin_attachment, terminals_per_cell
from nrsim.planning.planner import ScenarioPlanner, plan
from nrsim.planning.spectrum import linear_power_budget, plan_spectrum
from nrsim.qos.qci_mapping import QosClass


class TestSpectrumPlan(unittest.TestCase):
    """Test bandwidth and power partitioning."""

    def test_shares_sum_to_one(self):
        bands = [
            BandConfig(center_frequency=28e9, bandwidth=100e6, numerology=4),
            BandConfig(center_frequency=28.2e9, bandwidth=300e6, numerology=2),
        ]
        spectrum = plan_spectrum(bands, 55.0)
        self.assertAlmostEqual(spectrum.share_sum, 1.0)
        self.assertAlmostEqual(spectrum.get_band(0).band_share, 0.25)
        self.assertAlmostEqual(spectrum.get_band(1).band_share, 0.75)
        self.assertEqual(spectrum.total_bandwidth, 400e6)

    def test_power_split(self):
        bands = [
            BandConfig(center_frequency=28e9, bandwidth=100e6),
            BandConfig(center_frequency=28.2e9, bandwidth=300e6),
        ]
        spectrum = plan_spectrum(bands, 55.0)
        budget = linear_power_budget(55.0)
        self.assertAlmostEqual(spectrum.linear_power_budget, 20 ** 11)
        self.assertAlmostEqual(spectrum.bands[0].tx_power, 10 * math.log10(0.25 * budget))
        self.assertAlmostEqual(spectrum.bands[1].tx_power, 10 * math.log10(0.75 * budget))
        self.assertGreater(spectrum.bands[1].tx_power, spectrum.bands[0].tx_power)

    def test_missing_band(self):
        with self.assertRaises(KeyError):
            plan_spectrum([BandConfig(center_frequency=28e9, bandwidth=100e6)], 55.0).get_band(1)

    def test_invalid_bandwidth(self):
        with self.assertRaises(ScenarioError):
            plan_spectrum([BandConfig(center_frequency=28e9, bandwidth=0.0)], 55.0)
        with self.assertRaises(ScenarioError):
            plan_spectrum([], 55.0)


class TestAttachment(unittest.TestCase):
    """Test terminal attachment and class assignment."""

    def test_round_robin(self):
        attachment = round_robin_attachment(5, 3)
        self.assertEqual(attachment, {0: 0, 1: 1, 2: 2, 3: 0, 4: 1})

    def test_terminals_per_cell(self):
        served = terminals_per_cell(round_robin_attachment(5, 3), 3)
        self.assertEqual(served, {0: [0, 3], 1: [1, 4], 2: [2]})

    def test_more_cells_than_terminals(self):
        served = terminals_per_cell(round_robin_attachment(2, 4), 4)
        self.assertEqual(served[3], [])

    def test_no_cells(self):
        with self.assertRaises(ValueError):
            round_robin_attachment(5, 0)

    def test_assign_traffic_classes(self):
        classes = assign_traffic_classes(4, ["voice", "low_latency"])
        self.assertEqual(classes, {0: "voice", 1: "low_latency", 2: "voice", 3: "low_latency"})


class TestScenarioPlanner(unittest.TestCase):
    """Test planning complete scenarios."""

    def setUp(self):
        self.config = ScenarioConfig(
            num_cells=3,
            num_terminals=5,
            total_tx_power=55.0,
            bands=(
                BandConfig(center_frequency=28e9, bandwidth=400e6, numerology=3),
                BandConfig(center_frequency=28.2e9, bandwidth=400e6, numerology=2),
            ),
            double_operational_band=True,
            traffic_classes=(
                TrafficClassConfig(name="low_latency", port=1236, qos_class=QosClass.NGBR_LOW_LAT_EMBB),
            )
        )
        self.planner = ScenarioPlanner()

    def test_dual_band_plan(self):
        scenario = self.planner.plan(self.config)
        self.assertEqual(len(scenario.spectrum.bands), 2)
        self.assertAlmostEqual(scenario.spectrum.share_sum, 1.0)
        self.assertEqual(scenario.attachment, {0: 0, 1: 1, 2: 2, 3: 0, 4: 1})
        self.assertEqual(len(scenario.bearers), 1)
        self.assertEqual(scenario.bearers[0].bwp_id, 1)
        self.assertEqual(scenario.bearers[0].qos_class, QosClass.NGBR_LOW_LAT_EMBB)
        self.assertAlmostEqual(scenario.flow_duration, 59.9)

    def test_cells_share_power_settings(self):
        scenario = self.planner.plan(self.config)
        self.assertEqual(len(scenario.cells), 3)
        for cell in scenario.cells:
            self.assertEqual(cell.numerologies, (3, 2))
            self.assertEqual(cell.tx_powers, scenario.cells[0].tx_powers)
            self.assertIsNone(cell.position)

    def test_single_band(self):
        """Test that a single band takes the whole budget."""
        config = replace(self.config, double_operational_band=False)
        scenario = self.planner.plan(config)
        self.assertEqual(len(scenario.spectrum.bands), 1)
        band = scenario.spectrum.bands[0]
        self.assertEqual(band.band_share, 1.0)
        self.assertEqual(band.numerology, 3)
        self.assertAlmostEqual(band.tx_power, 10 * math.log10(linear_power_budget(55.0)))
        self.assertEqual(scenario.bearers[0].bwp_id, 0)

    def test_single_band_ignores_second_band(self):
        config = replace(self.config, double_operational_band=False,
                         bands=(BandConfig(center_frequency=28e9, bandwidth=400e6, numerology=3),))
        scenario = self.planner.plan(config)
        self.assertEqual(scenario.spectrum.total_bandwidth, 400e6)

    def test_frequency_too_low(self):
        config = replace(self.config, bands=(
            BandConfig(center_frequency=0.1e9, bandwidth=400e6),
            BandConfig(center_frequency=28.2e9, bandwidth=400e6),
        ))
        with self.assertRaises(InvalidFrequency) as ctx:
            self.planner.plan(config)
        self.assertEqual(ctx.exception.band_index, 0)

    def test_frequency_too_high(self):
        config = replace(self.config, bands=(
            BandConfig(center_frequency=28e9, bandwidth=400e6),
            BandConfig(center_frequency=500e9, bandwidth=400e6),
        ))
        with self.assertRaises(InvalidFrequency) as ctx:
            self.planner.plan(config)
        self.assertEqual(ctx.exception.band_index, 1)

    def test_configurable_max_frequency(self):
        config = replace(self.config, max_frequency=600e9, bands=(
            BandConfig(center_frequency=28e9, bandwidth=400e6),
            BandConfig(center_frequency=500e9, bandwidth=400e6),
        ))
        scenario = self.planner.plan(config)
        self.assertEqual(scenario.spectrum.bands[1].center_frequency, 500e9)

    def test_duplicate_port(self):
        config = replace(self.config, traffic_classes=(
            TrafficClassConfig(name="voice", port=1235, qos_class=QosClass.GBR_CONV_VOICE),
            TrafficClassConfig(name="video", port=1235, qos_class=QosClass.GBR_CONV_VIDEO),
        ))
        with self.assertRaises(DuplicatePort):
            self.planner.plan(config)

    def test_duplicate_port_same_class_name(self):
        """Test that a repeated class on the same port is a port conflict."""
        voice = TrafficClassConfig(name="voice", port=1235, qos_class=QosClass.GBR_CONV_VOICE)
        config = replace(ScenarioConfig(), traffic_classes=(voice, voice))
        with self.assertRaises(DuplicatePort) as ctx:
            self.planner.plan(config)
        self.assertEqual(ctx.exception.port, 1235)

    def test_invalid_scenarios(self):
        invalid = [
            replace(self.config, num_cells=0),
            replace(self.config, num_terminals=0),
            replace(self.config, traffic_classes=()),
            replace(self.config, bands=(BandConfig(center_frequency=28e9, bandwidth=400e6),)),
            replace(self.config, cell_positions=((0.0, 0.0, 10.0),)),
            replace(self.config, app_start_time=60.0),
        ]
        for config in invalid:
            with self.assertRaises(ScenarioError):
                self.planner.plan(config)

    def test_mixed_traffic(self):
        config = replace(self.config, traffic_classes=(
            TrafficClassConfig(name="voice", port=1235, qos_class=QosClass.GBR_CONV_VOICE),
            TrafficClassConfig(name="low_latency", port=1236, qos_class=QosClass.NGBR_LOW_LAT_EMBB),
        ))
        scenario = plan(config)
        self.assertEqual([b.bwp_id for b in scenario.bearers], [1, 0])
        self.assertEqual(scenario.bearer_for(0).traffic_class, "voice")
        self.assertEqual(scenario.bearer_for(3).traffic_class, "low_latency")

    def test_plan_is_deterministic(self):
        self.assertEqual(self.planner.plan(self.config), self.planner.plan(self.config))

    def test_as_dict(self):
        data = self.planner.plan(self.config).as_dict()
        self.assertEqual(len(data['spectrum']['bands']), 2)
        self.assertEqual(data['attachment']['4'], 1)
        self.assertEqual(data['bearers'][0]['port_start'], 1236)
        self.assertEqual(data['scheduler'], "ns3::NrMacSchedulerTdmaRR")


if __name__ == '__main__':
    unittest.main()
