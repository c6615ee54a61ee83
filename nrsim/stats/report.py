"""
Text report and file export of aggregated flow KPIs.
"""

import json
import logging
import math
import sys
from typing import Any, Dict, List, Optional, TextIO

from .aggregator import AggregationResult, FlowKPI, FlowStatus

logger = logging.getLogger(__name__)


def _fmt(value: float, precision: int = 4) -> str:
    if value is None or math.isnan(value):
        return "n/a"
    return f"{value:.{precision}f}"


def _flow_lines(kpi: FlowKPI) -> List[str]:
    record = kpi.record
    return [
        f"Flow {record.flow_id} ({record.five_tuple}) proto {record.five_tuple.protocol_name}",
        f"  Tx Packets: {record.tx_packets}",
        f"  Tx Bytes:   {record.tx_bytes}",
        f"  TxOffered:  {_fmt(kpi.offered_mbps)} Mbps",
        f"  Rx Bytes:   {record.rx_bytes}",
        f"  Throughput: {_fmt(kpi.throughput_mbps)} Mbps",
        f"  Mean delay: {_fmt(kpi.mean_delay_ms)} ms",
        f"  Packet loss rate: {_fmt(kpi.loss_rate_percent, 2)} %",
        f"  Rx Packets: {record.rx_packets}",
    ]


def format_report(result: AggregationResult) -> str:
    """
    Render per-flow KPI blocks, in observed order, followed by the network summary.

    Values without data are shown as ``n/a``.
    """
    lines: List[str] = []
    for kpi in result.flow_kpis:
        lines.append("")
        lines.extend(_flow_lines(kpi))
        if kpi.status is FlowStatus.MALFORMED:
            lines.append("  Warning: malformed record, no data")

    network = result.network
    lines.extend([
        "",
        "",
        f"  Mean throughput: {_fmt(network.mean_throughput_mbps)} Mbps",
        f"  Mean delay: {_fmt(network.mean_delay_ms)} ms",
        f"  Packet loss rate: {_fmt(network.packet_loss_rate_percent, 2)} %",
        f"  Fairness index: {_fmt(network.fairness_index)}",
        f"  Contributing flows: {network.contributing_flows} of {network.total_flows}",
    ])
    return "\n".join(lines) + "\n"


def print_report(result: AggregationResult, stream: Optional[TextIO] = None):
    """Write the KPI report to standard output (or ``stream``)."""
    (stream or sys.stdout).write(format_report(result))


def _json_value(value: Any) -> Any:
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def result_as_dict(result: AggregationResult) -> Dict[str, Any]:
    """JSON-serialisable view of an aggregation result, NaN as null"""
    flows = [
        {key: _json_value(value) for key, value in row.items()}
        for row in result.to_dataframe().to_dict(orient='records')
    ]
    network = {key: _json_value(value) for key, value in result.network_as_dict().items()}
    return {
        'flow_duration': result.flow_duration,
        'flows': flows,
        'network': network,
    }


def export_results(result: AggregationResult, output_file: str):
    """Export results to file."""
    if output_file.endswith('.json'):
        _export_json(result, output_file)
    elif output_file.endswith('.csv'):
        _export_csv(result, output_file)
    else:
        raise ValueError(f"Unsupported file format: {output_file}")
    logger.info(f"Results exported to {output_file}")


def _export_json(result: AggregationResult, filename: str):
    """Export results to JSON."""
    with open(filename, 'w') as f:
        json.dump(result_as_dict(result), f, indent=2, default=str)


def _export_csv(result: AggregationResult, filename: str):
    """Export per-flow KPIs to CSV."""
    result.to_dataframe().to_csv(filename, index=False)
