from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv

from budget_tracker.core.aggregator import DEFAULT_BUDGETS, default_categories
from budget_tracker.core.categorizer import DEFAULT_RULES, rules_from_mapping
from budget_tracker.exceptions import MissingSecretConfig

DEFAULT_CONFIG: Dict[str, object] = {
    "api": {
        "base_url": "https://api.up.com.au/api/v1",
        "page_size": 100,
        "timeout": 10.0,
        "fetch_deadline": None,
        "status_filter": None,
    },
    "token_env": "API_KEY",
    "loader": "up",
    "loaders": {
        "up": "budget_tracker.loaders.up.UpBankClient",
    },
    "budgets": {name: float(amount) for name, amount in DEFAULT_BUDGETS.items()},
    "categories": {cat: list(keywords) for cat, keywords in DEFAULT_RULES},
    "output_dir": "data",
    "output_modules": {
        "text": "budget_tracker.outputs.text_output.TextOutput",
        "csv": "budget_tracker.outputs.csv_output.CSVOutput",
        "html": "budget_tracker.outputs.html_output.HTMLOutput",
    },
}


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            # budgets and categories replace the defaults wholesale
            if key in ("budgets", "categories"):
                continue
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def load_config(path: Path | str | None = None) -> Dict[str, object]:
    if path is None or not Path(path).exists():
        return copy.deepcopy(DEFAULT_CONFIG)
    with Path(path).open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    for key in ("api", "budgets", "categories", "loaders", "output_modules"):
        if key in data and not isinstance(data[key], dict):
            raise ValueError(f"Config key '{key}' must be a mapping")
    return _merge_defaults(data, DEFAULT_CONFIG)


@dataclass
class Settings:
    """Token and resolved configuration, built once at startup."""
    token: str
    config: Dict[str, object] = field(default_factory=lambda: copy.deepcopy(DEFAULT_CONFIG))

    @property
    def api(self) -> Dict[str, object]:
        return self.config["api"]  # type: ignore[return-value]

    @property
    def base_url(self) -> str:
        return str(self.api["base_url"]).rstrip("/")

    @property
    def page_size(self) -> int:
        return int(self.api["page_size"])

    @property
    def timeout(self) -> float:
        return float(self.api["timeout"])

    @property
    def fetch_deadline(self) -> Optional[float]:
        value = self.api.get("fetch_deadline")
        return float(value) if value else None

    @property
    def status_filter(self) -> Optional[str]:
        return self.api.get("status_filter") or None  # type: ignore[return-value]

    @property
    def rules(self):
        return rules_from_mapping(self.config["categories"])

    @property
    def output_dir(self) -> str:
        return str(self.config.get("output_dir", "data"))

    def new_catalog(self):
        return default_categories(self.config["budgets"])


def _check_config(config: Dict[str, object]) -> None:
    """Fail fast on values that would otherwise only break the first request."""
    default_categories(config["budgets"])  # type: ignore[arg-type]
    rules_from_mapping(config["categories"])
    api = config["api"]
    for key, convert in (("page_size", int), ("timeout", float), ("fetch_deadline", float)):
        value = api.get(key)  # type: ignore[attr-defined]
        if value is None and key == "fetch_deadline":
            continue
        try:
            number = convert(value)
        except (TypeError, ValueError):
            raise ValueError(f"Config key 'api.{key}' must be a number, got {value!r}")
        if number <= 0 and key != "fetch_deadline":
            raise ValueError(f"Config key 'api.{key}' must be positive")


def load_settings(config_path: Path | str | None = None, env_file: Path | str | None = None) -> Settings:
    """Read the config file and the bearer token; a missing token is fatal."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()
    config = load_config(config_path)
    _check_config(config)
    env_var = str(config.get("token_env") or "API_KEY")
    token = os.environ.get(env_var, "").strip()
    if not token:
        raise MissingSecretConfig(env_var)
    return Settings(token=token, config=config)
