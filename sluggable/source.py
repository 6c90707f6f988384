"""ABOUTME: Resolves the pre-uniqueness slug candidate for a record.
ABOUTME: Reuses a custom slug set by the caller, otherwise derives and normalizes one from the record."""

import logging
from typing import Any

from sluggable.options import Derivation, FieldList, SlugOptions
from sluggable.protocols import Normalizer, SluggableRecord

logger = logging.getLogger(__name__)

SOURCE_SEPARATOR = "-"


def _comparable(value: Any) -> str:
    """Map a field value to a string so that unset and empty compare equal."""
    if value is None:
        return ""
    return str(value)


def has_custom_slug_been_used(record: SluggableRecord, options: SlugOptions) -> bool:
    """Determine if the caller set the slug field by hand since the last save.

    Args:
        record: The record being slugged.
        options: Options naming the slug field.

    Returns:
        True if the current slug field value differs from its original value.
    """
    original = record.get_original_field(options.slug_field)
    current = record.get_field(options.slug_field)
    return _comparable(original) != _comparable(current)


def get_slug_source_string(record: SluggableRecord, options: SlugOptions) -> str:
    """Build the raw source string and cap it at the configured maximum length.

    Unset fields contribute an empty segment. The cap counts characters and is
    applied before normalization.

    Args:
        record: The record being slugged.
        options: Options naming the source and the maximum length.

    Returns:
        The truncated source string.
    """
    source = options.source
    if isinstance(source, Derivation):
        source_string = _comparable(source.function(record))
    elif isinstance(source, FieldList):
        source_string = SOURCE_SEPARATOR.join(_comparable(record.get_field(name)) for name in source.names)
    else:
        raise TypeError(f"Unsupported slug source: {source!r}")

    return source_string[: options.maximum_length]


def generate_non_unique_slug(record: SluggableRecord, options: SlugOptions, normalizer: Normalizer) -> str:
    """Return the slug candidate before uniqueness resolution.

    A custom slug is returned verbatim, without truncation or normalization.
    """
    if has_custom_slug_been_used(record, options):
        logger.debug(
            "Using custom %s for %s #%s", options.slug_field, record.get_record_type(), record.get_primary_key()
        )
        return _comparable(record.get_field(options.slug_field))

    logger.debug("Deriving %s for %s from its source fields", options.slug_field, record.get_record_type())
    return normalizer(get_slug_source_string(record, options))
