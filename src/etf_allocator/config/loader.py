"""
Runtime Config Loader
=====================
Load allocation plans from JSON/YAML files, normalize them into the runtime
config format and apply them to a PortfolioSession.

Plan format (all sections optional):

    allocations:  {bonds: 30, equity: 60, commodities: 10}
    fund_weights: {equity: {IE00B4L5Y983: 70, IE00BKM4GZ66: 30}}
    starred:      [IE00B4L5Y983]
    filters:      {equity: {distribution: Acc, sort_by: ter}}
    export:       {enabled: true, output_dir: ./output, formats: [csv, json]}

"selections" is accepted as an alias of "fund_weights"; a list of ids
instead of a mapping selects them with weight 0.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from etf_allocator.config.user_config import get_config
from etf_allocator.utils.exceptions import ConfigError
from etf_allocator.utils.logger import get_logger

logger = get_logger(__name__)


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        import yaml  # type: ignore
    except ImportError as exc:
        raise ConfigError("PyYAML not installed. Install with `pip install pyyaml`.") from exc
    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("YAML config must be a mapping at top level.")
    return data


def load_config_file(path: str) -> Dict[str, Any]:
    file_path = Path(path)
    if not file_path.exists():
        raise ConfigError(f"Config file not found: {path}")

    suffix = file_path.suffix.lower()
    if suffix in {".yml", ".yaml"}:
        return _load_yaml(file_path)
    if suffix == ".json":
        with file_path.open("r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError("JSON config must be an object at top level.")
        return data

    raise ConfigError(f"Unsupported config format: {suffix}. Use .json or .yaml/.yml.")


def _section(raw: Dict[str, Any], *names: str) -> Any:
    # Accept lowercase or UPPERCASE section names
    for name in names:
        for key in (name, name.upper()):
            if key in raw:
                return raw[key]
    return None


def _require_mapping(value: Any, name: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{name}' must be a mapping, got {type(value).__name__}")
    return value


def _normalize_weights(raw_weights: Any) -> Dict[str, Dict[str, Any]]:
    weights = _require_mapping(raw_weights, "fund_weights")
    normalized: Dict[str, Dict[str, Any]] = {}
    for category, funds in weights.items():
        if isinstance(funds, (list, tuple)):
            normalized[category] = {str(fund_id): 0 for fund_id in funds}
        elif isinstance(funds, dict):
            normalized[category] = {str(fund_id): w for fund_id, w in funds.items()}
        else:
            raise ConfigError(f"fund_weights.{category} must be a mapping or a list of ids")
    return normalized


FILTER_KEYS = ("distribution", "replication", "currency", "sort_by")
FILTER_KEY_ALIASES = {"sortBy": "sort_by"}


def _normalize_filter(category: str, state: Any) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}
    for key, value in _require_mapping(state, f"filters.{category}").items():
        name = FILTER_KEY_ALIASES.get(key, key)
        if name not in FILTER_KEYS:
            raise ConfigError(
                f"Unknown filter '{key}' in filters.{category}. Allowed: {', '.join(FILTER_KEYS)}"
            )
        changes[name] = value
    return changes


def build_runtime_config(raw: Dict[str, Any], base: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Normalize an external plan into runtime format.
    """
    config: Dict[str, Any] = dict(base or get_config())

    allocations = _section(raw, "allocations")
    if allocations is not None:
        config["allocations"] = dict(_require_mapping(allocations, "allocations"))

    weights = _section(raw, "fund_weights", "selections")
    if weights is not None:
        config["fund_weights"] = _normalize_weights(weights)

    starred = _section(raw, "starred")
    if starred is not None:
        if not isinstance(starred, (list, tuple)):
            raise ConfigError("Section 'starred' must be a list of ids")
        config["starred"] = [str(fund_id) for fund_id in starred]

    filters = _section(raw, "filters")
    if filters is not None:
        config["filters"] = {
            category: _normalize_filter(category, state)
            for category, state in _require_mapping(filters, "filters").items()
        }

    export = _section(raw, "export")
    if export is not None:
        current = config.get("export", {})
        config["export"] = {**current, **_require_mapping(export, "export")}

    amounts = _section(raw, "reference_amounts")
    if amounts is not None:
        if not isinstance(amounts, (list, tuple)) or not all(isinstance(a, (int, float)) for a in amounts):
            raise ConfigError("Section 'reference_amounts' must be a list of numbers")
        config["reference_amounts"] = [int(a) for a in amounts]

    return config


def apply_plan(session, config: Dict[str, Any]) -> None:
    """
    Applica filtri, allocazioni, pesi e stelle di un config normalizzato.

    Gli id non presenti nel catalogo vengono comunque registrati (le metriche
    li ignorano) ma segnalati con un warning.
    """
    for category, changes in config.get("filters", {}).items():
        session.set_filter(category, **changes)

    for category, value in config.get("allocations", {}).items():
        session.set_category_allocation(category, value)

    for category, funds in config.get("fund_weights", {}).items():
        for fund_id, weight in funds.items():
            if fund_id not in session.catalogue:
                logger.warning(f"ETF {fund_id} non presente nel catalogo")
            if weight:
                session.set_fund_weight(category, fund_id, weight)
            elif not session.ledger.is_selected(category, fund_id):
                session.toggle_fund_selection(category, fund_id)

    for fund_id in config.get("starred", []):
        if not session.is_starred(fund_id):
            session.toggle_star(fund_id)
