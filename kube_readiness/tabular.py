"""
Parse the human-readable table printed by ``kubectl get``.

Columns are located by header name rather than by position, so the
parser keeps working when kubectl adds, drops or reorders columns
between versions (e.g. ``DESIRED CURRENT AVAILABLE`` versus ``READY
UP-TO-DATE AVAILABLE`` for deployments).
"""
import re
from typing import Dict, List, Optional

from kube_readiness.models import ResourceKind, ResourceStatus, parse_ready_fraction

# Header cells are separated by two or more spaces; single spaces belong
# to the header itself ("NOMINATED NODE", "READINESS GATES")
_HEADER_CELL = re.compile(r"\S+(?: \S+)*")


def parse_table(text: str) -> List[Dict[str, str]]:
    """Split kubectl table output into one dict per row, keyed by header name."""
    lines = [line for line in (text or "").splitlines() if line.strip()]
    if not lines:
        return []

    header = lines[0]
    cells = [(m.group(0), m.start()) for m in _HEADER_CELL.finditer(header)]
    rows = []
    for line in lines[1:]:
        row = {}
        for idx, (name, start) in enumerate(cells):
            end = cells[idx + 1][1] if idx + 1 < len(cells) else None
            row[name] = line[start:end].strip()
        rows.append(row)
    return rows


def _count(value: Optional[str]) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


def status_from_row(kind: ResourceKind, row: Dict[str, str]) -> Optional[ResourceStatus]:
    """Build a ResourceStatus from one parsed table row; None for an empty row."""
    if not row or not row.get("NAME"):
        return None

    phase = row.get("STATUS") or None
    if kind is ResourceKind.NAMESPACE:
        return ResourceStatus(phase=phase)

    ready_count = None
    desired_count = None
    fraction = parse_ready_fraction(row.get("READY", ""))
    if fraction is not None:
        ready_count, desired_count = fraction
    elif "DESIRED" in row:
        desired_count = _count(row.get("DESIRED"))
        # daemonsets and replicasets print READY as a plain count, old
        # deployment tables only have AVAILABLE
        ready_count = _count(row.get("READY"))
        if ready_count is None:
            ready_count = _count(row.get("AVAILABLE"))

    return ResourceStatus(ready_count=ready_count, desired_count=desired_count, phase=phase)
