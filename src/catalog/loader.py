"""Catalog file loading and validation utilities."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.catalog.models import ServiceProvider
from src.catalog.source import DEFAULT_MAX_CANDIDATES, InMemoryCatalog


class CatalogLoader:
    """Load provider catalogs from YAML or JSON files.

    Accepted layouts are a top-level list of providers or a mapping with a
    `providers` list.
    """

    def load_providers(self, path: Path | str) -> list[ServiceProvider]:
        """Load and validate every provider in a catalog file."""
        catalog_path = Path(path)
        if not catalog_path.exists():
            raise FileNotFoundError(f"Catalog not found: {catalog_path}")

        suffix = catalog_path.suffix.lower()
        if suffix in {".yaml", ".yml"}:
            data = self._load_yaml(catalog_path)
        elif suffix == ".json":
            data = self._load_json(catalog_path)
        else:
            data = self._load_unknown(catalog_path)

        entries = self._provider_entries(data, catalog_path)
        try:
            return [ServiceProvider.model_validate(entry) for entry in entries]
        except ValidationError as e:
            raise ValueError(f"Invalid provider entry in {catalog_path}: {e}") from e

    def load_catalog(
        self, path: Path | str, max_candidates: int = DEFAULT_MAX_CANDIDATES
    ) -> InMemoryCatalog:
        return InMemoryCatalog(self.load_providers(path), max_candidates=max_candidates)

    def _provider_entries(self, data: object, path: Path) -> list[dict]:
        if data is None:
            return []
        if isinstance(data, dict):
            data = data.get("providers", [])
        if not isinstance(data, list):
            raise ValueError(f"Catalog must be a list of providers: {path}")
        for entry in data:
            if not isinstance(entry, dict):
                raise ValueError(f"Each provider must be a mapping/dict: {path}")
        return data

    def _load_yaml(self, path: Path) -> object:
        try:
            with path.open("r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML catalog: {path}") from e

    def _load_json(self, path: Path) -> object:
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON catalog: {path}") from e

    def _load_unknown(self, path: Path) -> object:
        """Auto-detect and load a catalog when the file extension is unknown."""
        raw = path.read_text(encoding="utf-8")
        raw_stripped = raw.lstrip()

        # Try JSON first if it looks like JSON, otherwise fall back to YAML.
        if raw_stripped.startswith("{") or raw_stripped.startswith("["):
            try:
                return json.loads(raw)
            except json.JSONDecodeError:
                pass

        try:
            return yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid catalog format: {path}") from e


def load_catalog(
    path: Path | str, max_candidates: int = DEFAULT_MAX_CANDIDATES
) -> InMemoryCatalog:
    """Convenience wrapper around CatalogLoader.load_catalog."""
    return CatalogLoader().load_catalog(path, max_candidates=max_candidates)
