"""
Statistics module for 5G NR simulations.

This module loads the flow records reported after a run and reduces them into
per-flow and network-wide KPIs.
"""

from .records import FiveTuple, RawFlowRecord, load_flow_records
from .aggregator import StatsAggregator, AggregationResult, FlowKPI, NetworkKPI, FlowStatus, aggregate
from .report import format_report, print_report, export_results

__all__ = ['FiveTuple', 'RawFlowRecord', 'load_flow_records',
           'StatsAggregator', 'AggregationResult', 'FlowKPI', 'NetworkKPI', 'FlowStatus', 'aggregate',
           'format_report', 'print_report', 'export_results']
