# CAsense - Practice management & financial insights for accounting professionals
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for CAsense.

This module is responsible for:
- loading the main application configuration from a TOML file,
- applying defaults for every optional section,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomllib  # Python 3.11+

from .store import StoreConfig

DEFAULT_CONFIG_FILE = "casense_config.toml"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}
_LOG_FORMATS = {"console", "json"}
_DISPLAY_MODES = {"table", "csv", "both"}


@dataclass(frozen=True)
class TaxConfig:
    """Default parameters for the tax calculators."""

    gst_rate: float = 18.0
    liability_rate: float = 0.18
    default_regime: str = "new"


@dataclass(frozen=True)
class LoggingConfig:
    """Log level and renderer used by configure_logging()."""

    level: str = "WARNING"
    format: str = "console"


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for CAsense.

    This aggregates:
    - the record store configuration (where clients, transactions and
      invoices are kept),
    - business defaults (currency, default dashboard period),
    - tax calculator defaults,
    - compliance calendar options,
    - display options for tables and CSV export,
    - logging options.
    """

    store: StoreConfig
    currency: str = "INR"
    default_period: str = "month"
    tax: TaxConfig = field(default_factory=TaxConfig)
    due_soon_days: int = 7
    display_mode: str = "table"
    output_dir: Path = Path("data/output")
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a TOML table by name, or an empty mapping if absent/invalid."""
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _float_setting(section: Mapping[str, Any], key: str, default: float) -> float:
    raw_value = section.get(key)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{key}' in the configuration. Expected a number."
        ) from exc


def _choice_setting(
    section: Mapping[str, Any], key: str, default: str, allowed: set[str]
) -> str:
    value = str(section.get(key) or default)
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ValueError(
            f"Invalid value {value!r} for '{key}' in the configuration. "
            f"Expected one of: {choices}."
        )
    return value


def default_app_config(base_dir: Optional[Path] = None) -> AppConfig:
    """
    Build an AppConfig with built-in defaults only.

    The store path is resolved relative to ``base_dir`` (current working
    directory by default).
    """
    root = (base_dir or Path.cwd()).resolve()
    return AppConfig(
        store=StoreConfig(engine="json", path=root / "data" / "casense.json"),
        output_dir=root / "data" / "output",
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the CAsense application configuration from a TOML file.

    Expected top-level sections in the TOML file (all optional)
    ------------------------------------------------------------
    [store]
        Record store engine ("json") and the path of the JSON document.

    [business]
        Presentation currency and default dashboard period.

    [tax]
        Default GST rate, rate of the simplified liability estimate and
        default income-tax regime.

    [compliance]
        Number of days before a deadline that flags it as "due soon".

    [display]
        Display mode for tabular results and CSV output directory.

    [logging]
        Log level and renderer (console or json).

    Notes
    -----
    - All file paths in the TOML are resolved relative to the directory of
      the TOML file itself.
    - When no path is given and the default file does not exist, the
      built-in defaults are returned.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return default_app_config()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Store section
    store_section = _section(raw, "store")
    store_engine = str(store_section.get("engine") or "json")
    store_path_raw = store_section.get("path") or "data/casense.json"
    store_path = (base_dir / str(store_path_raw)).resolve()

    # 2) Business section
    business_section = _section(raw, "business")
    currency = str(business_section.get("currency") or "INR")
    default_period = str(business_section.get("default_period") or "month")

    # 3) Tax section
    tax_section = _section(raw, "tax")
    tax = TaxConfig(
        gst_rate=_float_setting(tax_section, "gst_rate", 18.0),
        liability_rate=_float_setting(tax_section, "liability_rate", 0.18),
        default_regime=_choice_setting(
            tax_section, "default_regime", "new", {"old", "new"}
        ),
    )

    # 4) Compliance section
    compliance_section = _section(raw, "compliance")
    try:
        due_soon_days = int(compliance_section.get("due_soon_days", 7))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'compliance.due_soon_days' in the configuration. "
            "Expected an integer."
        ) from exc

    # 5) Display options
    display_section = _section(raw, "display")
    display_mode = _choice_setting(display_section, "mode", "table", _DISPLAY_MODES)
    output_dir_raw = display_section.get("output_dir") or "data/output"
    output_dir = (base_dir / str(output_dir_raw)).resolve()

    # 6) Logging options
    logging_section = _section(raw, "logging")
    logging_config = LoggingConfig(
        level=_choice_setting(logging_section, "level", "WARNING", _LOG_LEVELS),
        format=_choice_setting(logging_section, "format", "console", _LOG_FORMATS),
    )

    return AppConfig(
        store=StoreConfig(engine=store_engine, path=store_path),
        currency=currency,
        default_period=default_period,
        tax=tax,
        due_soon_days=due_soon_days,
        display_mode=display_mode,
        output_dir=output_dir,
        logging=logging_config,
    )
