from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

from qbank.catalog import FILENAME_RE
from qbank.models import BundleGroup
from qbank.utils import get_logger

logger = get_logger(__name__)


def discover_inputs(data_dir: Path) -> Tuple[List[str], List[str]]:
    """Split the CSV directory listing into (matched, ignored), both sorted by name."""
    if not data_dir.is_dir():
        logger.warning("discovery: input dir not found: %s", data_dir)
        return [], []

    matched: List[str] = []
    ignored: List[str] = []
    for p in data_dir.iterdir():
        if not p.is_file():
            continue
        if FILENAME_RE.match(p.name):
            matched.append(p.name)
        else:
            ignored.append(p.name)
    matched.sort()
    ignored.sort()

    for name in ignored:
        logger.warning("discovery: ignoring unmatched file %s", name)
    logger.info("discovery: matched=%d ignored=%d dir=%s", len(matched), len(ignored), data_dir)
    return matched, ignored


def group_by_year(filenames: List[str]) -> List[BundleGroup]:
    groups: Dict[str, BundleGroup] = {}
    for name in sorted(filenames):
        key = name[:3].lower()
        groups.setdefault(key, BundleGroup(year_key=key)).filenames.append(name)
    return list(groups.values())
