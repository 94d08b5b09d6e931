#!/usr/bin/env python3
"""Site configuration validation script."""

import sys
from pathlib import Path
from typing import List

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from feature_app.config.loader import ConfigLoader
from feature_app.config.validation import ConfigValidator, ValidationError
from feature_app.logging import configure_from_config


def validate_card(loader: ConfigLoader, card: dict) -> List[ValidationError]:
    """Validate a card declaration and its merged parameters."""
    errors = ConfigValidator.validate_card_spec(card)
    card_id = card.get("id")
    if card_id:
        config = loader.merge_config(card_id)
        errors.extend(ConfigValidator.validate_config(config))
    return errors


def main():
    """Main validation function."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    loader = ConfigLoader.create(config_dir)
    configure_from_config(loader.merge_config())
    print(f"🔍 Validating site configuration in {loader.config_dir}...")

    all_valid = True

    site_errors = ConfigValidator.validate_config(loader.merge_config())
    if site_errors:
        print(f"❌ Found {len(site_errors)} site-level validation errors:")
        for error in site_errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        all_valid = False
    else:
        print("✅ Site-level settings are valid")

    cards = loader.load_card_specs()
    if not cards:
        print("⚠️  No cards declared")

    seen_ids = set()
    for card in cards:
        card_id = card.get("id", "<missing id>")
        print(f"\n🧩 Validating card {card_id} ({card.get('kind')})...")

        if card_id in seen_ids:
            print(f"❌ Duplicate card id: {card_id}")
            all_valid = False
            continue
        seen_ids.add(card_id)

        errors = validate_card(loader, card)
        if errors:
            print(f"❌ Found {len(errors)} validation errors:")
            for error in errors:
                print(f"  • {error.field}: {error.message} (value: {error.value})")
            all_valid = False
        else:
            print(f"✅ {card_id} configuration is valid")

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
