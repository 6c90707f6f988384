"""ABOUTME: Loaders for per-record-type slug options stored in YAML.
ABOUTME: Parses sluggable.yml into pydantic models that build SlugOptions."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from sluggable.options import SlugOptions
from sluggable.settings import settings


class SlugOptionsConfig(BaseModel):
    """Slug options for a single record type."""

    generate_slugs_from: list[str] = Field(default_factory=list)
    save_slugs_to: str = "slug"
    maximum_length: int = Field(default_factory=lambda: settings.DEFAULT_MAXIMUM_LENGTH)
    generate_unique_slugs: bool = True
    generate_slugs_on_create: bool = True
    generate_slugs_on_update: bool = True

    def to_options(self) -> SlugOptions:
        """Build the SlugOptions value described by this entry.

        Values are not validated here; the generator's guard rejects invalid ones.
        """
        options = (
            SlugOptions.create()
            .generate_slugs_from(*self.generate_slugs_from)
            .save_slugs_to(self.save_slugs_to)
            .slugs_should_be_no_longer_than(self.maximum_length)
        )
        if not self.generate_unique_slugs:
            options = options.allow_duplicate_slugs()
        if not self.generate_slugs_on_create:
            options = options.do_not_generate_slugs_on_create()
        if not self.generate_slugs_on_update:
            options = options.do_not_generate_slugs_on_update()
        return options


class SluggableConfig(BaseModel):
    """Slug options keyed by record type (table name)."""

    record_types: dict[str, SlugOptionsConfig]

    def get_options(self, record_type: str) -> SlugOptions:
        """Return the SlugOptions configured for a record type.

        Args:
            record_type: Record type as defined in the config.

        Returns:
            Fresh SlugOptions for the record type.

        Raises:
            KeyError: If record_type is not configured.
        """
        if record_type not in self.record_types:
            raise KeyError(f"Record type '{record_type}' not found in configuration")

        return self.record_types[record_type].to_options()

    def get_record_types(self) -> list[str]:
        """Return list of configured record types."""
        return list(self.record_types.keys())


def load_sluggable_config(config_path: Path | None = None) -> SluggableConfig:
    """Load slug options configuration from YAML file.

    Args:
        config_path: Path to the config file. Defaults to settings.slug_config_path.

    Returns:
        Parsed SluggableConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config file is invalid.
    """
    if config_path is None:
        config_path = settings.slug_config_path

    if not config_path.exists():
        raise FileNotFoundError(f"Sluggable config not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    return SluggableConfig.model_validate(raw_config)
