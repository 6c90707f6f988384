"""ABOUTME: Makes slug candidates unique among sibling records.
ABOUTME: Probes the store and appends -1, -2, ... until no other record holds the slug."""

import logging

from sluggable.options import SlugOptions
from sluggable.protocols import SluggableRecord, SlugStore

logger = logging.getLogger(__name__)

# Key excluded from the existence query when the record has not been saved yet.
UNSAVED_RECORD_KEY = 0


def other_record_exists_with_slug(
    record: SluggableRecord,
    options: SlugOptions,
    slug: str,
    store: SlugStore,
) -> bool:
    """Check whether another record of the same type already uses `slug`.

    Soft-deleted records still count when the record type supports soft deletion.

    Args:
        record: The record being slugged, excluded from the match by its key.
        options: Options naming the slug field.
        slug: Slug value to look for.
        store: Storage answering the existence query.

    Returns:
        True if a sibling record holds the slug.
    """
    key = record.get_primary_key()
    return store.exists_other_with_field_value(
        record.get_record_type(),
        options.slug_field,
        slug,
        exclude_key=key if key is not None else UNSAVED_RECORD_KEY,
        include_trashed=record.supports_soft_delete(),
    )


def make_slug_unique(
    record: SluggableRecord,
    options: SlugOptions,
    slug: str,
    store: SlugStore,
) -> str:
    """Suffix `slug` with an increasing counter until it is free and non-empty.

    Numbering restarts at 1 on every call. An empty slug is never returned.

    Args:
        record: The record being slugged.
        options: Options naming the slug field.
        slug: Base candidate.
        store: Storage answering the existence query.

    Returns:
        The first candidate that is non-empty and not used by a sibling record.
    """
    base = slug
    counter = 1
    while slug == "" or other_record_exists_with_slug(record, options, slug, store):
        logger.debug("Slug %r is taken or empty for %s, trying suffix %d", slug, record.get_record_type(), counter)
        slug = f"{base}-{counter}"
        counter += 1
    return slug
