"""
Terminal to cell attachment.

Terminals are attached round-robin by index, independent of where the
terminals and cells are placed, so the same scenario always yields the same
attachment.
"""

from typing import Dict, List, Sequence

AttachmentMap = Dict[int, int]


def round_robin_attachment(num_terminals: int, num_cells: int) -> AttachmentMap:
    """Attach terminal ``i`` to cell ``i mod num_cells``."""
    if num_cells < 1:
        raise ValueError(f"Need at least one cell, got {num_cells}")
    return {terminal: terminal % num_cells for terminal in range(num_terminals)}


def terminals_per_cell(attachment: AttachmentMap, num_cells: int) -> Dict[int, List[int]]:
    """Invert an attachment map into the terminals served by each cell"""
    served: Dict[int, List[int]] = {cell: [] for cell in range(num_cells)}
    for terminal, cell in sorted(attachment.items()):
        served[cell].append(terminal)
    return served


def assign_traffic_classes(num_terminals: int, class_names: Sequence[str]) -> Dict[int, str]:
    """Spread terminals over the traffic classes, alternating by index"""
    if not class_names:
        return {}
    return {terminal: class_names[terminal % len(class_names)] for terminal in range(num_terminals)}
