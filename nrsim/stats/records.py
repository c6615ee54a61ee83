"""
Raw flow records reported by the simulator's flow monitor.

Each record holds the counters of one five-tuple flow at the end of the run.
Records are read-only snapshots: they are loaded once and reduced by the
aggregator without being modified.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, NamedTuple, Union

import pandas as pd

from ..core.errors import MalformedRecord

logger = logging.getLogger(__name__)

PROTOCOL_NAMES = {6: "TCP", 17: "UDP"}
PROTOCOL_NUMBERS = {name: number for number, name in PROTOCOL_NAMES.items()}

REQUIRED_COLUMNS = [
    'flowId', 'sourceAddress', 'sourcePort', 'destinationAddress', 'destinationPort',
    'protocol', 'txPackets', 'txBytes', 'rxPackets', 'rxBytes', 'delaySumSeconds'
]


class FiveTuple(NamedTuple):
    """Flow classifier key"""
    source_address: str
    source_port: int
    destination_address: str
    destination_port: int
    protocol: int

    @property
    def protocol_name(self) -> str:
        return "TCP" if self.protocol == 6 else "UDP"

    def __str__(self) -> str:
        return (f"{self.source_address}:{self.source_port} -> "
                f"{self.destination_address}:{self.destination_port}")


@dataclass(frozen=True)
class RawFlowRecord:
    """Final counters of one observed flow"""
    flow_id: int
    five_tuple: FiveTuple
    tx_packets: int
    tx_bytes: int
    rx_packets: int
    rx_bytes: int
    delay_sum: float  # seconds

    def validate(self):
        """
        Check the record against the flow monitor's counter semantics.

        Raises:
            MalformedRecord: If a counter is negative, or packets were
                received on a flow that never transmitted
        """
        for name in ('tx_packets', 'tx_bytes', 'rx_packets', 'rx_bytes', 'delay_sum'):
            if getattr(self, name) < 0:
                raise MalformedRecord(self.flow_id, f"{name} is negative")
        if self.rx_packets > 0 and self.tx_packets == 0:
            raise MalformedRecord(self.flow_id, f"{self.rx_packets} packets received but none transmitted")


def _protocol_number(value) -> int:
    if isinstance(value, str) and not value.strip().isdigit():
        try:
            return PROTOCOL_NUMBERS[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown protocol: {value}") from None
    return int(value)


def records_from_dataframe(df: pd.DataFrame) -> List[RawFlowRecord]:
    """
    Convert a flow table into records, keeping row order.

    Raises:
        ValueError: If a required column is missing
    """
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"Flow records are missing columns: {', '.join(missing)}")

    records = []
    for row in df.itertuples(index=False):
        records.append(RawFlowRecord(
            flow_id=int(row.flowId),
            five_tuple=FiveTuple(
                source_address=str(row.sourceAddress),
                source_port=int(row.sourcePort),
                destination_address=str(row.destinationAddress),
                destination_port=int(row.destinationPort),
                protocol=_protocol_number(row.protocol)
            ),
            tx_packets=int(row.txPackets),
            tx_bytes=int(row.txBytes),
            rx_packets=int(row.rxPackets),
            rx_bytes=int(row.rxBytes),
            delay_sum=float(row.delaySumSeconds)
        ))
    return records


def load_flow_records(path: Union[str, Path]) -> List[RawFlowRecord]:
    """
    Load flow records from a CSV or JSON file.

    JSON files hold either a list of flow objects or an object with a
    ``flows`` list. Both use the column names in REQUIRED_COLUMNS.

    Args:
        path: Path to the flow record file

    Returns:
        Records in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the format is unsupported or columns are missing
    """
    records_path = Path(path)
    if not records_path.exists():
        raise FileNotFoundError(f"Flow record file not found: {path}")

    suffix = records_path.suffix.lower()
    if suffix == '.csv':
        df = pd.read_csv(records_path)
    elif suffix == '.json':
        with open(records_path, 'r') as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get('flows', [])
        df = pd.DataFrame(data, columns=None if data else REQUIRED_COLUMNS)
    else:
        raise ValueError(f"Unsupported flow record format: {records_path.suffix}")

    records = records_from_dataframe(df)
    logger.info(f"Loaded {len(records)} flow records from {path}")
    return records
