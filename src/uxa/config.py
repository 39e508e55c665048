"""Settings loaders — environment credentials and the optional YAML options file."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import yaml

from uxa.errors import MissingConfiguration
from uxa.schemas.config import REQUIRED_ENV_VARS, AuditOptions, EvaluatorSettings


def load_settings(environ: Mapping[str, str] | None = None) -> EvaluatorSettings:
    """Read the evaluator settings from the environment.

    Empty values count as missing.  Raises ``MissingConfiguration`` listing
    every absent variable.
    """
    env = os.environ if environ is None else environ
    missing = [name for name in REQUIRED_ENV_VARS if not env.get(name, "").strip()]
    if missing:
        raise MissingConfiguration(missing)
    return EvaluatorSettings(
        **{field: env[name].strip() for name, field in REQUIRED_ENV_VARS.items()}
    )


def load_options(path: str | Path | None = None) -> AuditOptions:
    """Load and validate an options file, or return defaults when ``path`` is None.

    Raises ``FileNotFoundError`` if the path doesn't exist and
    ``pydantic.ValidationError`` if the YAML content is invalid.
    """
    if path is None:
        return AuditOptions()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = yaml.safe_load(path.read_text())
    # An empty file loads as None
    if raw is None:
        return AuditOptions()
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    return AuditOptions(**raw)
