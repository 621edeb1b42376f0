import os
import json
import datetime as dt
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from jsonschema import validate, Draft202012Validator
from jsonschema.exceptions import ValidationError
from email.utils import parsedate_to_datetime
from typing import Optional, Any

# ---------- Time helpers ----------

def now_utc():
    return dt.datetime.now(dt.timezone.utc)

def iso_z(value: dt.datetime) -> str:
    """Render an aware datetime as UTC ISO-8601 with milliseconds and a ``Z`` suffix."""
    return value.astimezone(dt.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def default_content_version(now: dt.datetime) -> str:
    return now.astimezone(dt.timezone.utc).strftime("%Y.%m.%d")

def parse_datetime_safe(raw: str) -> Optional[dt.datetime]:
    """Best-effort parsing for timestamps found in CSV cells.

    Returns a timezone-aware UTC datetime on success, otherwise ``None``.
    """

    if not raw:
        return None

    raw = raw.strip()

    # Fast path: ISO 8601 (with optional trailing Z and fractional seconds)
    iso_candidate = raw
    if raw.endswith("Z"):
        iso_candidate = raw[:-1] + "+00:00"

    try:
        dt_obj = dt.datetime.fromisoformat(iso_candidate)
        if dt_obj.tzinfo is None:
            dt_obj = dt_obj.replace(tzinfo=dt.timezone.utc)
        return dt_obj.astimezone(dt.timezone.utc)
    except ValueError:
        pass

    # RFC 2822 / email style timestamps
    try:
        dt_obj = parsedate_to_datetime(raw)
        if dt_obj:
            if dt_obj.tzinfo is None:
                dt_obj = dt_obj.replace(tzinfo=dt.timezone.utc)
            return dt_obj.astimezone(dt.timezone.utc)
    except (TypeError, ValueError):
        pass

    # Spreadsheet exports
    for fmt in ("%Y/%m/%d %H:%M:%S", "%Y/%m/%d"):
        try:
            dt_obj = dt.datetime.strptime(raw, fmt)
            return dt_obj.replace(tzinfo=dt.timezone.utc)
        except ValueError:
            continue

    return None

# ---------- Value helpers ----------

def to_int(value: Any) -> Optional[int]:
    """Coerce a CSV cell to int. ``"3"``, ``" 3 "`` and ``"3.0"`` all give 3.

    Blank or non-integral values give ``None``.
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        pass
    try:
        f = float(s)
    except ValueError:
        return None
    if not f.is_integer():
        return None
    return int(f)

# ---------- Config validation ----------

def load_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()

def _load_schema(name: str) -> dict:
    here = os.path.dirname(os.path.abspath(__file__))
    return json.loads(load_file(os.path.join(here, "schemas", name)))

def validate_config(cfg: dict):
    schema = _load_schema("config.schema.json")
    try:
        validate(instance=cfg, schema=schema, cls=Draft202012Validator)
    except ValidationError as e:
        raise ValueError(f"Config validation error: {e.message} at {list(e.path)}") from e

def validate_manifest(doc: dict):
    schema = _load_schema("manifest.schema.json")
    try:
        validate(instance=doc, schema=schema, cls=Draft202012Validator)
    except ValidationError as e:
        raise ValueError(f"Manifest validation error: {e.message} at {list(e.path)}") from e

# ---------- Output writer ----------

def write_json_atomic(obj: Any, path: Path) -> None:
    """Write JSON to ``path`` through a temp file and an atomic replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)
    tmp.replace(path)

# ---------- Logging ----------

_LOGGER_INITIALIZED = False

class JsonFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "ts": dt.datetime.fromtimestamp(record.created, dt.timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def _build_logger():
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    # File logging only when a directory is requested; console is the default sink
    log_dir = os.getenv("LOG_DIR")
    json_mode = os.getenv("LOG_JSON", "false").lower() == "true"

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level, logging.INFO))

    if json_mode:
        fmt = JsonFormatter()
    else:
        fmt = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    ch = logging.StreamHandler()
    ch.setLevel(logger.level)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        fh = TimedRotatingFileHandler(os.path.join(log_dir, "qbank-build.log"), when="D", backupCount=7, encoding="utf-8")
        fh.setLevel(logger.level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    _LOGGER_INITIALIZED = True

def get_logger(name: str = None) -> logging.Logger:
    _build_logger()
    return logging.getLogger(name if name else __name__)
