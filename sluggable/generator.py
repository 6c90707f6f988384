"""ABOUTME: Orchestrates slug generation for a single record.
ABOUTME: Validates options, picks a custom or derived candidate, makes it unique, and writes it back."""

import logging

from sluggable.normalize import slugify
from sluggable.options import SlugOptions, guard_against_invalid_slug_options
from sluggable.protocols import Normalizer, SluggableRecord, SlugStore
from sluggable.source import generate_non_unique_slug
from sluggable.uniqueness import make_slug_unique

logger = logging.getLogger(__name__)


class SlugGenerator:
    """Generate slugs for records backed by `store`.

    The existence check and the record's eventual commit are not atomic: two
    concurrent saves deriving the same base can both see the slug as free.
    Callers sharing a database need the store to serialize the check with the
    write (SqliteRecordStore does this with an immediate transaction) or a
    unique constraint on the slug column as a backstop.

    Args:
        store: Storage used to detect slug collisions.
        normalizer: Turns the raw source string into a URL-safe token.
    """

    def __init__(self, store: SlugStore, normalizer: Normalizer = slugify) -> None:
        self.store = store
        self.normalizer = normalizer

    def generate_slug(self, record: SluggableRecord) -> None:
        """Generate the slug now, regardless of the on-create/on-update flags."""
        self.add_slug(record, record.get_slug_options())

    def add_slug(self, record: SluggableRecord, options: SlugOptions) -> None:
        """Write a slug into the record's slug field.

        Args:
            record: The record to slug.
            options: Options for this generation request.

        Raises:
            InvalidOption: If the options are invalid. Raised before the record
                is touched or the store is queried.
        """
        guard_against_invalid_slug_options(options)

        slug = generate_non_unique_slug(record, options, self.normalizer)

        if options.generate_unique_slugs:
            slug = make_slug_unique(record, options, slug, self.store)

        logger.debug("Setting %s.%s to %r", record.get_record_type(), options.slug_field, slug)
        record.set_field(options.slug_field, slug)
