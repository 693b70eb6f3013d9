#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List, Optional

import yaml

from autotrade_app.config.loader import ConfigLoader
from autotrade_app.config.validation import ConfigValidator, ValidationError


def configured_instruments(loader: ConfigLoader) -> List[str]:
    """Instrument ids listed in instruments.yaml."""
    instruments_file = loader.config_dir / "instruments.yaml"
    if not instruments_file.exists():
        return []
    with open(instruments_file) as f:
        data = yaml.safe_load(f) or {}
    return [str(key) for key in (data.get("instruments") or {})]


def validate_instrument_config(loader: ConfigLoader, instrument_id: str) -> List[ValidationError]:
    """Validate configuration for a specific instrument."""
    config = loader.merge_config(instrument_id)
    return ConfigValidator.validate_config(config)


def main(config_dir: Optional[str] = None):
    """Main validation function."""
    print("🔍 Validating Autotrade App configuration...")

    loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
    print(f"   Config directory: {loader.config_dir}")

    # Unknown instruments fall back to the defaults
    instruments = configured_instruments(loader) + ["UNKNOWN-INSTRUMENT"]

    all_valid = True
    for instrument_id in instruments:
        print(f"\n📊 Validating {instrument_id}...")

        try:
            errors = validate_instrument_config(loader, instrument_id)
        except yaml.YAMLError as e:
            print(f"❌ Could not parse instruments.yaml: {e}")
            sys.exit(1)

        if errors:
            print(f"❌ Found {len(errors)} validation errors:")
            for error in errors:
                print(f"  • {error.field}: {error.message} (value: {error.value})")
            all_valid = False
        else:
            print(f"✅ {instrument_id} configuration is valid")

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else None)
