"""KeywordGraphConfig dataclass: every option for one projection run, built once at startup."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .errors import ConfigurationError

DEFAULT_LABELS = [
    "cat", "mouse", "lion", "tiger", "helicopter", "train", "blue", "carrot", "space",
]
PROVIDERS = ("azure", "openai", "sentence-transformers")


@dataclass
class KeywordGraphConfig:
    # --- Input ---
    labels: List[str] = field(default_factory=lambda: list(DEFAULT_LABELS))

    # --- Embedding provider ---
    provider: str = "azure"
    dimensions: int = 512

    # --- Azure OpenAI ---
    azure_endpoint: str = ""
    azure_api_key: str = ""
    azure_embedding_deployment: str = ""
    azure_api_version: str = "2024-06-01"

    # --- OpenAI ---
    openai_api_key: str = ""
    openai_embedding_model: str = "text-embedding-3-small"

    # --- Local sentence-transformers ---
    embedding_model: str = "all-MiniLM-L6-v2"

    # --- Projection ---
    svd_solver: str = "full"
    iterated_power: int = 4
    random_state: Optional[int] = None

    # --- Outputs ---
    output_path: str = "embeddings.csv"
    basis_out: str = ""
    plot_out: str = ""


def config_from_env(environ: Optional[Mapping[str, str]] = None, **overrides: object) -> KeywordGraphConfig:
    """Build a config from the AZURE_OPENAI_* / OPENAI_API_KEY variables. Read once, here only."""
    env = os.environ if environ is None else environ
    cfg = KeywordGraphConfig(
        azure_endpoint=env.get("AZURE_OPENAI_ENDPOINT", ""),
        azure_api_key=env.get("AZURE_OPENAI_API_KEY", ""),
        azure_embedding_deployment=env.get("AZURE_OPENAI_EMBEDDING_DEPLOYMENT", ""),
        openai_api_key=env.get("OPENAI_API_KEY", ""),
    )
    for key, value in overrides.items():
        if not hasattr(cfg, key):
            raise ConfigurationError(f"Unknown configuration option: {key}")
        setattr(cfg, key, value)
    return cfg


def validate_config(cfg: KeywordGraphConfig) -> None:
    """Check provider settings and projection options; raise one ConfigurationError listing every problem."""
    errors: List[str] = []

    if cfg.provider not in PROVIDERS:
        errors.append(f"provider must be one of {', '.join(PROVIDERS)} (got {cfg.provider!r})")
    elif cfg.provider == "azure":
        if not cfg.azure_endpoint.strip():
            errors.append("Missing Azure OpenAI endpoint (AZURE_OPENAI_ENDPOINT)")
        if not cfg.azure_api_key.strip():
            errors.append("Missing Azure OpenAI API key (AZURE_OPENAI_API_KEY)")
        if not cfg.azure_embedding_deployment.strip():
            errors.append("Missing Azure OpenAI embedding deployment (AZURE_OPENAI_EMBEDDING_DEPLOYMENT)")
    elif cfg.provider == "openai":
        if not cfg.openai_api_key.strip():
            errors.append("Missing OpenAI API key (OPENAI_API_KEY)")
        if not cfg.openai_embedding_model.strip():
            errors.append("Missing OpenAI embedding model name")
    elif not cfg.embedding_model.strip():
        errors.append("Missing sentence-transformers model name")

    if cfg.dimensions < 1:
        errors.append(f"dimensions must be >= 1 (got {cfg.dimensions})")
    if cfg.svd_solver not in ("full", "randomized"):
        errors.append(f"svd_solver must be 'full' or 'randomized' (got {cfg.svd_solver!r})")
    if cfg.iterated_power < 0:
        errors.append(f"iterated_power must be >= 0 (got {cfg.iterated_power})")

    if errors:
        raise ConfigurationError(
            "Configuration validation failed:\n  " + "\n  ".join(errors)
        )
