#!/usr/bin/env python3
"""
Main scenario runner for the 5G NR Scenario Planning and Flow KPI Framework.

This script plans a scenario for the network simulator and, once the
simulator has run, reduces its flow records into a KPI report.

Usage:
    python run_scenario.py --scenario voice
    python run_scenario.py --config scenarios/low_latency.yaml --flows results/flow_stats.csv
    python run_scenario.py --help
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
import traceback

import jsonschema

from nrsim.planning.planner import ScenarioPlanner
from nrsim.stats.aggregator import StatsAggregator
from nrsim.stats.records import load_flow_records
from nrsim.stats.report import export_results, print_report
from nrsim.utils.config import ConfigManager
from nrsim.utils.visualization import KPIVisualizer


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='5G NR Scenario Planning and Flow KPI Framework',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --scenario low_latency
  %(prog)s --config scenarios/voice.json --flows results/flow_stats.csv
  %(prog)s --scenario voice --flows flows.json --output voice_kpis.json
  %(prog)s --create-scenario mixed --config-output scenarios/mixed.yaml
        """
    )

    # Main execution modes
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument('--config', '-c', type=str,
                       help='Configuration file path (JSON or YAML)')
    group.add_argument('--scenario', '-s', type=str,
                       choices=ConfigManager.get_available_scenarios(),
                       help='Use predefined scenario')
    group.add_argument('--create-scenario', type=str,
                       choices=ConfigManager.get_available_scenarios(),
                       help='Create a new scenario configuration file')

    # Optional parameters
    parser.add_argument('--flows', '-f', type=str,
                        help='Flow record file (CSV or JSON) reported by the simulator')
    parser.add_argument('--flow-duration', type=float,
                        help='Seconds of application traffic (defaults to simulation time minus app start time)')
    parser.add_argument('--output', '-o', type=str,
                        help='Output file for KPI results (.json or .csv)')
    parser.add_argument('--plan-output', type=str,
                        help='Output JSON file for the scenario plan')
    parser.add_argument('--results-dir', type=str, default='results',
                        help='Directory for results and visualizations')
    parser.add_argument('--config-output', type=str,
                        help='Output path for created scenario (used with --create-scenario)')
    parser.add_argument('--no-visualization', action='store_true',
                        help='Disable visualization generation')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose output')

    return parser.parse_args(argv)


def setup_logging(level: str, verbose: bool):
    """Configure root logging for the run."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.INFO),
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )


def setup_results_directory(results_dir: str):
    """Create results directory if it doesn't exist."""
    Path(results_dir).mkdir(parents=True, exist_ok=True)
    print(f"Results will be saved to: {results_dir}")


def load_scenario(args):
    """Load the scenario configuration selected on the command line."""
    if args.config:
        print(f"Loading configuration from: {args.config}")
        return ConfigManager.load_config(args.config)

    print(f"Using predefined scenario: {args.scenario}")
    return ConfigManager.config_from_dict(ConfigManager.get_scenario_config(args.scenario))


def print_plan(plan):
    """Print the scenario plan."""
    print("\nSpectrum plan:")
    for band in plan.spectrum.bands:
        print(f"  Band {band.band_index}: {band.center_frequency / 1e9:g} GHz, "
              f"{band.bandwidth / 1e6:g} MHz, numerology {band.numerology}, "
              f"share {band.band_share:.3f}, Tx power {band.tx_power:.2f} dBm")
    print(f"  Total bandwidth: {plan.spectrum.total_bandwidth / 1e6:g} MHz")

    print("Attachment:")
    for terminal, cell in plan.attachment.items():
        print(f"  Terminal {terminal} -> cell {cell} ({plan.terminal_classes[terminal]})")

    print("Bearers:")
    for bearer in plan.bearers:
        print(f"  {bearer.traffic_class}: {bearer.qos_class.name} (5QI {bearer.qos_class.value}), "
              f"port {bearer.port_start}-{bearer.port_end}, BWP {bearer.bwp_id}")
    print(f"Scheduler: {plan.scheduler}")


def run_scenario(config, args) -> bool:
    """Plan the scenario and, if flow records are given, report their KPIs."""
    print("\n" + "=" * 60)
    print("5G NR SCENARIO PLANNING AND FLOW KPI FRAMEWORK")
    print("=" * 60)

    if args.verbose:
        print("Configuration:")
        print(f"  Simulation time: {config.simulation_time}s")
        print(f"  Cells: {config.num_cells}")
        print(f"  Terminals: {config.num_terminals}")
        print(f"  Dual band: {config.double_operational_band}")
        print(f"  Total Tx power: {config.total_tx_power} dBm")
        print()

    plan = ScenarioPlanner().plan(config)
    print_plan(plan)

    if args.plan_output:
        plan_path = os.path.join(args.results_dir, os.path.basename(args.plan_output))
        with open(plan_path, 'w') as f:
            json.dump(plan.as_dict(), f, indent=2)
        print(f"Plan saved to: {plan_path}")

    if not args.flows:
        return True

    records = load_flow_records(args.flows)
    flow_duration = args.flow_duration if args.flow_duration is not None else plan.flow_duration
    result = StatsAggregator().aggregate(records, flow_duration)
    print_report(result)

    if args.output:
        output_path = os.path.join(args.results_dir, os.path.basename(args.output))
        export_results(result, output_path)
        print(f"Results saved to: {output_path}")

    if config.enable_plots and not args.no_visualization:
        print("\nGenerating visualizations...")
        try:
            KPIVisualizer().create_comprehensive_report(result, plan, args.results_dir)
            print(f"Visualizations created in: {args.results_dir}")
        except (OSError, ValueError) as e:
            print(f"Warning: Error generating visualizations: {e}")
            if args.verbose:
                traceback.print_exc()

    print("\n" + "=" * 60)
    return True


def create_scenario_config(scenario: str, args) -> bool:
    """Create a new scenario configuration file."""
    output_file = args.config_output or f"scenarios/{scenario}.json"

    print(f"Creating {scenario} scenario configuration...")

    try:
        Path(output_file).parent.mkdir(parents=True, exist_ok=True)
        ConfigManager.create_default_config(output_file, scenario)
        print(f"Configuration created: {output_file}")
        print("You can now modify this file and run it with:")
        print(f"  python run_scenario.py --config {output_file}")
        return True
    except OSError as e:
        print(f"Error creating configuration: {e}")
        return False


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)

    if args.create_scenario:
        setup_logging("INFO", args.verbose)
        sys.exit(0 if create_scenario_config(args.create_scenario, args) else 1)

    try:
        config = load_scenario(args)
    except (OSError, ValueError, jsonschema.ValidationError) as e:
        print(f"Error loading configuration: {e}")
        sys.exit(1)

    setup_logging(config.log_level, args.verbose)
    setup_results_directory(args.results_dir)

    try:
        success = run_scenario(config, args)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        success = False
    except (OSError, ValueError) as e:
        print(f"Error running scenario: {e}")
        if args.verbose:
            traceback.print_exc()
        success = False

    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
