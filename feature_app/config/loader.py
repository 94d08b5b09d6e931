"""Site configuration loading with three-tier parameter precedence."""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .defaults import DefaultConfig, get_default_config

SITE_FILE = "site.yaml"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return base updated with override; nested mappings merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


@dataclass(frozen=True)
class ConfigLoader:
    """Reads config/site.yaml and layers it over the dataclass defaults."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Loader for config_dir, or the repository's config/ directory."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"
        return cls(config_dir=Path(config_dir), defaults=get_default_config())

    @property
    def site_file(self) -> Path:
        return self.config_dir / SITE_FILE

    def load_site_config(self) -> dict[str, Any]:
        """Raw site file contents; empty when the file is absent."""
        if not self.site_file.exists():
            return {}
        with open(self.site_file, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def load_card_specs(self) -> list[dict[str, Any]]:
        """Card declarations from the site file, in page order."""
        return list(self.load_site_config().get("cards") or [])

    def load_card_config(self, card_id: str) -> dict[str, Any]:
        """The overrides block declared for card_id in the site file."""
        for card in self.load_card_specs():
            if card.get("id") == card_id:
                return card.get("overrides") or {}
        return {}

    def merge_config(
        self,
        card_id: Optional[str] = None,
        card_overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit per-card overrides (highest priority)
        2. Site file sections, then the card's declared overrides
        3. Dataclass defaults (lowest priority)
        """
        site_config = self.load_site_config()
        layers = [
            {k: v for k, v in site_config.items() if k != "cards"},
            self.load_card_config(card_id) if card_id else {},
            card_overrides or {},
        ]

        config = asdict(self.defaults)
        for layer in layers:
            config = deep_merge(config, layer)
        return config
