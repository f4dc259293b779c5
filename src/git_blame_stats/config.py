from __future__ import annotations

import json
from pathlib import Path

from .analysis_buckets import parse_day_buckets
from .models import GRANULARITIES, GROUP_BY_CHOICES, OUTPUT_FORMATS, THEN_BY_CHOICES, CacheConfig, ScanConfig

IMPLICIT_CONFIG_NAMES = (".gitstats.config.json", "gitstats.config.json")

# camelCase spellings written by the earlier tooling.
_KEY_ALIASES = {
    "additionalRepoPaths": "additional_repo_paths",
    "outputFormat": "output_format",
    "htmlOutputFile": "html_output_file",
    "filenameGlobs": "filename_globs",
    "excludeGlobs": "exclude_globs",
    "groupBy": "group_by",
    "thenBy": "then_by",
    "dayBuckets": "day_buckets",
    "historyDepth": "history_depth",
    "discoveryDepth": "discovery_depth",
    "fileName": "file_name",
}


def _normalize_keys(obj: dict) -> dict:
    out: dict = {}
    for k, v in obj.items():
        key = _KEY_ALIASES.get(k, k)
        out[key] = _normalize_keys(v) if isinstance(v, dict) else v
    return out


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    obj = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(obj, dict):
        raise ValueError(f"Config must be a JSON object: {config_path}")
    return _normalize_keys(obj)


def find_implicit_config(target: Path) -> Path | None:
    base = target if target.is_dir() else target.parent
    for name in IMPLICIT_CONFIG_NAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def read_config_file(explicit: Path | None, target: Path) -> dict:
    """
    Load the explicit config (errors propagate) or the implicit one in `target`
    (unreadable or invalid implicit files are ignored).
    """
    if explicit is not None:
        if not explicit.exists():
            raise FileNotFoundError(f"Config file not found: {explicit}")
        return load_config(explicit)
    implicit = find_implicit_config(target)
    if implicit is None:
        return {}
    try:
        return load_config(implicit)
    except (OSError, ValueError):
        return {}


def _pick(cli_value: object, file_cfg: dict, key: str, default: object) -> object:
    if cli_value is not None and cli_value != [] and cli_value != ():
        return cli_value
    v = file_cfg.get(key)
    if v is None:
        return default
    return v


def _choice(value: object, choices: tuple[str, ...], key: str) -> str:
    s = str(value or "").strip().lower()
    if s not in choices:
        raise ValueError(f"Invalid {key}: {value!r} (expected one of {', '.join(choices)})")
    return s


def _str_tuple(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(str(v).strip() for v in value if str(v).strip())


def build_config(cli: dict, file_cfg: dict) -> ScanConfig:
    """
    Merge CLI values over config-file values over defaults.

    `cli` maps ScanConfig field names to parsed argument values; None (or an
    empty list) means "not given on the command line".
    """
    defaults = ScanConfig()
    cache_cfg = file_cfg.get("cache") if isinstance(file_cfg.get("cache"), dict) else {}

    day_buckets_raw = _pick(cli.get("day_buckets"), file_cfg, "day_buckets", defaults.day_buckets)
    cache = CacheConfig(
        read=bool(_pick(cli.get("cache_read"), cache_cfg, "read", defaults.cache.read)),
        write=bool(_pick(cli.get("cache_write"), cache_cfg, "write", defaults.cache.write)),
        file_name=str(_pick(cli.get("cache_file"), cache_cfg, "file_name", defaults.cache.file_name)),
    )
    history_depth = int(_pick(cli.get("history_depth"), file_cfg, "history_depth", defaults.history_depth))
    discovery_depth = int(_pick(cli.get("discovery_depth"), file_cfg, "discovery_depth", defaults.discovery_depth))
    if history_depth < 0:
        raise ValueError(f"Invalid history_depth: {history_depth} (expected >= 0)")
    if discovery_depth < 1:
        raise ValueError(f"Invalid discovery_depth: {discovery_depth} (expected >= 1)")

    return ScanConfig(
        target_path=str(cli.get("target_path") or defaults.target_path),
        additional_repo_paths=_str_tuple(_pick(cli.get("additional_repo_paths"), file_cfg, "additional_repo_paths", ())),
        output_format=_choice(_pick(cli.get("output_format"), file_cfg, "output_format", defaults.output_format), OUTPUT_FORMATS, "output_format"),
        html_output_file=str(_pick(cli.get("html_output_file"), file_cfg, "html_output_file", defaults.html_output_file)),
        filename_globs=_str_tuple(_pick(cli.get("filename_globs"), file_cfg, "filename_globs", ())),
        exclude_globs=_str_tuple(_pick(cli.get("exclude_globs"), file_cfg, "exclude_globs", ())),
        group_by=_choice(_pick(cli.get("group_by"), file_cfg, "group_by", defaults.group_by), GROUP_BY_CHOICES, "group_by"),
        then_by=_choice(_pick(cli.get("then_by"), file_cfg, "then_by", defaults.then_by), THEN_BY_CHOICES, "then_by"),
        day_buckets=parse_day_buckets(day_buckets_raw),
        granularity=_choice(_pick(cli.get("granularity"), file_cfg, "granularity", defaults.granularity), GRANULARITIES, "granularity"),
        history_depth=history_depth,
        cluster=bool(_pick(cli.get("cluster"), file_cfg, "cluster", defaults.cluster)),
        discovery_depth=discovery_depth,
        cache=cache,
    )
