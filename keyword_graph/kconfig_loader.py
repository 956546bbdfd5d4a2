"""
Kconfig loader for keyword_graph.

Parses .config files (kconfiglib format) into KeywordGraphConfig. API keys are never stored in
the file: CONFIG_*_API_KEY_ENV names the environment variable, which is read once at load time.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .config import KeywordGraphConfig, validate_config


def _parse_config_file(path: str) -> Dict[str, object]:
    """Parse a kconfiglib .config into {KEY: value} (without CONFIG_ prefix)."""
    values: Dict[str, object] = {}
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, _, raw = line.partition("=")
            key = key.strip()
            if key.startswith("CONFIG_"):
                key = key[len("CONFIG_"):]
            raw = raw.strip()
            if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
                # Quoted values stay strings ("1,2" or "007" are labels, not numbers)
                values[key] = raw[1:-1]
            elif raw == "y":
                values[key] = True
            elif raw == "n":
                values[key] = False
            else:
                try:
                    values[key] = int(raw)
                except ValueError:
                    try:
                        values[key] = float(raw)
                    except ValueError:
                        values[key] = raw
    return values


def _parse_labels(raw: str) -> List[str]:
    """Parse comma-separated labels; surrounding whitespace and blanks are dropped, order is kept.

    Labels that contain commas or meaningful whitespace go through LABELS_FILE instead.
    """
    return [p.strip() for p in raw.split(",") if p.strip()]


def _read_labels_file(path: str) -> List[str]:
    """One label per line, kept verbatim (commas and spaces included); blank lines are skipped."""
    text = Path(path).read_text(encoding="utf-8")
    return [line for line in text.splitlines() if line.strip()]


def _resolve_path(config_dir: Path, raw: str) -> str:
    """If raw is a relative path, resolve it relative to config_dir; else return as-is."""
    if not raw:
        return raw
    path = Path(raw)
    if not path.is_absolute():
        path = (config_dir / path).resolve()
    return str(path)


def _optional_int(v: Dict[str, object], key: str) -> Optional[int]:
    raw = v.get(key)
    if raw is None or raw == "":
        return None
    return int(raw)


def _provider(v: Dict[str, object]) -> str:
    if "PROVIDER" in v:
        return str(v["PROVIDER"])
    if "USE_AZURE_OPENAI" in v:
        return "azure" if v["USE_AZURE_OPENAI"] is True else "openai"
    return "azure"


def load_config(
    config_path: str,
    environ: Optional[Mapping[str, str]] = None,
    validate: bool = True,
) -> KeywordGraphConfig:
    """Load a .config file and return a KeywordGraphConfig.

    All path options are resolved relative to the directory containing the config file when
    they are relative, so the same .config works from any working directory.

    Endpoint and deployment fall back to AZURE_OPENAI_ENDPOINT / AZURE_OPENAI_EMBEDDING_DEPLOYMENT
    when the file leaves them empty. Keys come from the variables named by
    CONFIG_AZURE_OPENAI_API_KEY_ENV and CONFIG_OPENAI_API_KEY_ENV.

    If validate is False, provider settings are not checked (e.g. when only the projection
    options are needed).
    """
    env = os.environ if environ is None else environ
    p = Path(config_path).resolve()
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")
    config_dir = p.parent
    v = _parse_config_file(str(p))

    if v.get("LABELS_FILE"):
        labels = _read_labels_file(_resolve_path(config_dir, str(v["LABELS_FILE"])))
    elif "LABELS" in v:
        labels = _parse_labels(str(v["LABELS"]))
    else:
        labels = KeywordGraphConfig().labels

    azure_key_env = str(v.get("AZURE_OPENAI_API_KEY_ENV", "AZURE_OPENAI_API_KEY"))
    openai_key_env = str(v.get("OPENAI_API_KEY_ENV", "OPENAI_API_KEY"))

    cfg = KeywordGraphConfig(
        labels=labels,
        provider=_provider(v),
        dimensions=int(v.get("DIMENSIONS", 512)),
        azure_endpoint=str(v.get("AZURE_OPENAI_ENDPOINT") or env.get("AZURE_OPENAI_ENDPOINT", "")),
        azure_api_key=env.get(azure_key_env, ""),
        azure_embedding_deployment=str(
            v.get("AZURE_OPENAI_EMBEDDING_DEPLOYMENT") or env.get("AZURE_OPENAI_EMBEDDING_DEPLOYMENT", "")
        ),
        azure_api_version=str(v.get("AZURE_OPENAI_API_VERSION", "2024-06-01")),
        openai_api_key=env.get(openai_key_env, ""),
        openai_embedding_model=str(v.get("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")),
        embedding_model=str(v.get("EMBEDDING_MODEL", "all-MiniLM-L6-v2")),
        svd_solver=str(v.get("SVD_SOLVER", "full")),
        iterated_power=int(v.get("ITERATED_POWER", 4)),
        random_state=_optional_int(v, "RANDOM_STATE"),
        output_path=_resolve_path(config_dir, str(v.get("OUTPUT_PATH", "embeddings.csv"))),
        basis_out=_resolve_path(config_dir, str(v.get("BASIS_OUT", ""))),
        plot_out=_resolve_path(config_dir, str(v.get("PLOT_OUT", ""))),
    )

    if validate:
        validate_config(cfg)

    return cfg
