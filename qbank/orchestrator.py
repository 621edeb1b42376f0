import os
import time
import uuid
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

from qbank.catalog import DEFAULT_EXAM_NAME
from qbank.models import Manifest, ManifestEntry, Question
from qbank.stages.discovery import discover_inputs, group_by_year
from qbank.stages.parsing import read_rows, validate_rows
from qbank.stages.normalize import normalize_group
from qbank.stages.ordering import sort_questions
from qbank.stages.packer import write_bundle
from qbank.stages.manifest import build_entry, build_manifest, write_manifest
from qbank.utils import validate_config, get_logger, now_utc, iso_z, default_content_version

logger = get_logger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "data_dir": "data",
    "exam_name": DEFAULT_EXAM_NAME,
    "output": {"dir": "dist"},
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Built-in defaults, overlaid with the YAML file when one is given."""
    cfg: Dict[str, Any] = {k: (dict(v) if isinstance(v, dict) else v) for k, v in DEFAULT_CONFIG.items()}
    if not config_path:
        return cfg
    with open(config_path, "r", encoding="utf-8") as f:
        loaded = yaml.safe_load(f) or {}
    validate_config(loaded)
    for k, v in loaded.items():
        if isinstance(v, dict):
            cfg.setdefault(k, {}).update(v)
        else:
            cfg[k] = v
    return cfg


def _apply_overrides(cfg: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> None:
    env_version = os.getenv("CONTENT_VERSION")
    if env_version:
        cfg["content_version"] = env_version

    if not overrides:
        return
    if overrides.get("data_dir") is not None:
        cfg["data_dir"] = overrides["data_dir"]
    if overrides.get("dist_dir") is not None:
        cfg.setdefault("output", {})["dir"] = overrides["dist_dir"]
    if overrides.get("content_version") is not None:
        cfg["content_version"] = overrides["content_version"]


def _process_group(year_key: str, filenames: List[str], data_dir: Path, *, build_ts: str, exam_name: str) -> List[Question]:
    rows = []
    for name in filenames:
        header, file_rows = read_rows(data_dir / name)
        validate_rows(header, file_rows, name)
        rows.extend(file_rows)
    items = normalize_group(rows, year_key, build_ts=build_ts, exam_name=exam_name)
    return sort_questions(items)


def build(cfg: Dict[str, Any]) -> Manifest:
    """Run discovery -> grouping -> per-group bundling -> manifest for one config."""
    now = now_utc()
    generated_at = iso_z(now)
    content_version = cfg.get("content_version") or default_content_version(now)
    data_dir = Path(cfg["data_dir"])
    dist_dir = Path(cfg["output"]["dir"])
    exam_name = cfg.get("exam_name") or DEFAULT_EXAM_NAME
    logger.info("build start data=%s dist=%s content_version=%s", data_dir, dist_dir, content_version)

    matched, _ignored = discover_inputs(data_dir)
    groups = group_by_year(matched)
    if not groups:
        logger.warning("no input files matched; emitting empty manifest")

    # every group is parsed and validated before the first bundle is written
    processed: List[Tuple[str, List[Question]]] = []
    for group in groups:
        t0 = time.monotonic()
        items = _process_group(group.year_key, group.filenames, data_dir, build_ts=generated_at, exam_name=exam_name)
        processed.append((group.year_key, items))
        logger.info(
            "group %s files=%d items=%d took_ms=%d",
            group.year_key,
            len(group.filenames),
            len(items),
            int((time.monotonic() - t0) * 1000),
        )

    entries: List[ManifestEntry] = []
    for year_key, items in processed:
        art = write_bundle(items, dist_dir, year_key)
        entries.append(build_entry(art, items, content_version=content_version, generated_at=generated_at))

    manifest = build_manifest(entries, content_version=content_version, generated_at=generated_at)
    write_manifest(manifest, dist_dir)
    return manifest


def run_once(
    config_path: Optional[str] = None,
    *,
    overrides: Optional[Dict[str, Any]] = None,
) -> Manifest:
    """Execute the build once; errors are logged and re-raised."""
    run_id = uuid.uuid4().hex[:8]
    logger.info("=== run start id=%s ===", run_id)

    try:
        cfg = load_config(config_path)
        _apply_overrides(cfg, overrides)
        manifest = build(cfg)
        logger.info("OK: bundles=%d", len(manifest.bundles))
        return manifest
    except Exception as e:
        logger.error("build failed: %s", e)
        raise
    finally:
        logger.info("=== run end id=%s ===", run_id)
