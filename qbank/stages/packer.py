"""JSONL serialization, gzip streaming and hashing of one bundle.

Lines are joined with "\\n" and the last line has no trailing newline. The gzip
header carries mtime 0 and no filename, so equal input gives equal bytes.
"""

from __future__ import annotations

import gzip
import hashlib
import json
import typing as t
from pathlib import Path

from qbank.models import BundleArtifact, Question
from qbank.utils import get_logger

logger = get_logger(__name__)

BUNDLE_SUFFIX = ".jsonl.gz"


def bundle_relpath(year_key: str) -> str:
    return f"bundles/{year_key}{BUNDLE_SUFFIX}"


def to_json_line(q: Question) -> str:
    return json.dumps(q.model_dump(mode="json"), ensure_ascii=False, separators=(",", ":"))


def iter_jsonl(items: t.Iterable[Question]) -> t.Iterator[str]:
    for i, q in enumerate(items):
        yield ("\n" if i else "") + to_json_line(q)


def compute_sha256(file_path: Path) -> str:
    """Compute SHA-256 hash of a file."""
    sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


def write_bundle(items: t.List[Question], dist_dir: Path, year_key: str) -> BundleArtifact:
    out_path = dist_dir / bundle_relpath(year_key)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    with open(out_path, "wb") as raw:
        with gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as gz:
            for chunk in iter_jsonl(items):
                gz.write(chunk.encode("utf-8"))

    art = BundleArtifact(
        year_key=year_key,
        path=out_path,
        items=len(items),
        size=out_path.stat().st_size,
        sha256=compute_sha256(out_path),
    )
    logger.info("packer: wrote %s items=%d size=%d sha256=%s", out_path, art.items, art.size, art.sha256[:12])
    return art


def read_bundle(path: Path) -> t.List[dict]:
    """Decode a written bundle back into records."""
    with gzip.open(path, "rt", encoding="utf-8") as f:
        text = f.read()
    if not text:
        return []
    return [json.loads(line) for line in text.split("\n")]
