"""
Module: config
Purpose: Resolve run settings from CLI flags, environment and defaults.
"""

import os
from dataclasses import dataclass
from typing import Iterable, Tuple

from .exceptions import ConfigurationError
from .sidecars import RENAME_POLICIES, RENAME_POLICY_CANDIDATE
from .utils import log_info, log_warning

DEFAULT_SIDECAR_SUFFIXES: Tuple[str, ...] = (".xmp",)
DEFAULT_RENAME_POLICY = RENAME_POLICY_CANDIDATE
SIDECAR_EXTS_ENV = "NAMEMEND_SIDECAR_EXTS"
RENAME_POLICY_ENV = "NAMEMEND_RENAME_POLICY"


@dataclass(frozen=True)
class Settings:
    """Effective settings for one run and where each value came from."""

    sidecar_suffixes: Tuple[str, ...] = DEFAULT_SIDECAR_SUFFIXES
    rename_policy: str = DEFAULT_RENAME_POLICY
    sidecar_source: str = "default"
    rename_policy_source: str = "default"


def normalize_suffixes(values: Iterable[str]) -> Tuple[str, ...]:
    """
    Turn user supplied extensions ("xmp", ".XMP", " .aae ") into a de-duplicated
    tuple of dotted suffixes.

    Raises:
        ValueError: If no usable suffix remains.
    """
    seen = set()
    suffixes = []
    for raw in values:
        value = raw.strip()
        if not value or value == ".":
            continue
        if not value.startswith("."):
            value = f".{value}"
        key = value.lower()
        if key in seen:
            continue
        seen.add(key)
        suffixes.append(value)
    if not suffixes:
        raise ValueError("At least one sidecar extension is required.")
    return tuple(suffixes)


def load_settings(
    cli_suffixes: Iterable[str] | None = None,
    cli_rename_policy: str | None = None,
) -> Settings:
    """
    Determine effective settings.
    Preference order: CLI override > environment variable > default.

    Args:
        cli_suffixes: Sidecar extensions given on the command line.
        cli_rename_policy: Rename policy given on the command line.

    Returns:
        Settings with the source of each value recorded.

    Raises:
        ConfigurationError: If a CLI value is invalid.
    """
    suffixes = DEFAULT_SIDECAR_SUFFIXES
    sidecar_source = "default"
    if cli_suffixes:
        try:
            suffixes = normalize_suffixes(cli_suffixes)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        sidecar_source = "cli"
    else:
        env_value = os.getenv(SIDECAR_EXTS_ENV)
        if env_value:
            try:
                suffixes = normalize_suffixes(env_value.split(","))
                sidecar_source = "env"
            except ValueError:
                log_warning(
                    f"Ignoring invalid {SIDECAR_EXTS_ENV} value '{env_value}'. "
                    "Expected a comma separated list of extensions."
                )

    policy = DEFAULT_RENAME_POLICY
    policy_source = "default"
    if cli_rename_policy:
        requested = cli_rename_policy.strip().lower()
        if requested not in RENAME_POLICIES:
            raise ConfigurationError(
                f"Unknown rename policy '{cli_rename_policy}'. Expected one of: {', '.join(RENAME_POLICIES)}."
            )
        policy = requested
        policy_source = "cli"
    else:
        env_value = os.getenv(RENAME_POLICY_ENV)
        if env_value:
            requested = env_value.strip().lower()
            if requested in RENAME_POLICIES:
                policy = requested
                policy_source = "env"
            else:
                log_warning(
                    f"Ignoring invalid {RENAME_POLICY_ENV} value '{env_value}'. "
                    f"Expected one of: {', '.join(RENAME_POLICIES)}."
                )

    log_info(
        f"Settings: sidecar suffixes {', '.join(suffixes)} (source={sidecar_source}), "
        f"rename policy {policy} (source={policy_source})"
    )
    return Settings(
        sidecar_suffixes=suffixes,
        rename_policy=policy,
        sidecar_source=sidecar_source,
        rename_policy_source=policy_source,
    )
