"""Option catalogue for the intake wizard, loaded from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

_DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "config" / "catalog.yml"


class IntentOption(BaseModel):
    title: str
    description: str = ""


class IntakeCatalog(BaseModel):
    """Select/checkbox options offered at each step.

    List-valued options are stored verbatim; mapping-valued options map the
    stored value to its display label.
    """

    intents: dict[str, IntentOption] = Field(default_factory=dict)
    cities: list[str] = Field(default_factory=list)
    property_types: list[str] = Field(default_factory=list)
    budget_ranges: list[str] = Field(default_factory=list)
    price_expectation_ranges: list[str] = Field(default_factory=list)
    buyer_timelines: list[str] = Field(default_factory=list)
    selling_timelines: list[str] = Field(default_factory=list)
    selling_reasons: dict[str, str] = Field(default_factory=dict)
    property_conditions: dict[str, str] = Field(default_factory=dict)
    pre_approval_statuses: dict[str, str] = Field(default_factory=dict)
    contact_preferences: dict[str, str] = Field(default_factory=dict)

    def options(self, name: str) -> list[str]:
        """Return the accepted stored values for a named option list."""
        # Iterating a mapping yields its stored values (the keys).
        return list(getattr(self, name))

    def label(self, name: str, value: Any) -> str:
        """Return the display label for a stored value, or the value itself."""
        if value is None or value == "":
            return ""
        key = str(value)
        if name == "intents":
            option = self.intents.get(key)
            return option.title if option else key
        mapping = getattr(self, name)
        if isinstance(mapping, dict):
            return mapping.get(key, key)
        return key

    def search_cities(self, query: str = "", exclude: list[str] | None = None) -> list[str]:
        """Case-insensitive substring search over cities, minus ``exclude``."""
        needle = query.strip().lower()
        skip = set(exclude or [])
        return [
            city for city in self.cities
            if needle in city.lower() and city not in skip
        ]


def load_catalog(path: str | Path | None = None) -> IntakeCatalog:
    """Load the option catalogue.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
    """
    catalog_path = Path(path) if path else _DEFAULT_CATALOG_PATH
    with open(catalog_path) as fh:
        data = yaml.safe_load(fh) or {}
    return IntakeCatalog(**data)
