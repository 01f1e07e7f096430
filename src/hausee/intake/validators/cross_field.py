"""Cross-field validation for wizard section data."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "cross_field_rules.yml"


class CrossFieldValidator:
    """Validates relationships between fields within a wizard section.

    Rule types:
    - conditional_required: if field_a == value then field_b is required
    """

    def __init__(self, config_path: str | Path | None = None) -> None:
        self._config_path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH
        self._rules: dict[str, list[dict[str, Any]]] = {}
        self._load_config()

    def _load_config(self) -> None:
        if not self._config_path.exists():
            return
        with open(self._config_path) as fh:
            data = yaml.safe_load(fh) or {}
        self._rules = data.get("sections", {})

    def validate(self, section: str, data: dict[str, Any]) -> dict[str, list[str]]:
        """Validate cross-field rules for one section's data.

        Returns:
            Dict mapping field names to lists of error messages. Empty dict means valid.
        """
        rules = self._rules.get(section, [])
        errors: dict[str, list[str]] = {}

        for rule in rules:
            rule_type = rule.get("type")
            rule_errors = self._check_rule(rule_type, rule, data)
            for field_id, msgs in rule_errors.items():
                errors.setdefault(field_id, []).extend(msgs)

        return errors

    def _check_rule(
        self, rule_type: str | None, rule: dict[str, Any], data: dict[str, Any]
    ) -> dict[str, list[str]]:
        if rule_type == "conditional_required":
            return self._check_conditional_required(rule, data)
        return {}

    def _check_conditional_required(
        self, rule: dict[str, Any], data: dict[str, Any]
    ) -> dict[str, list[str]]:
        field_a = rule.get("field_a", "")
        value = rule.get("value")
        field_b = rule.get("field_b", "")

        actual = data.get(field_a)
        if actual != value:
            return {}

        val_b = data.get(field_b)
        if val_b is None or (isinstance(val_b, str) and not val_b.strip()):
            msg = rule.get("message", f"{field_b} is required when {field_a} is {value}.")
            return {field_b: [msg]}
        return {}
