"""ABOUTME: Sluggable generates unique, URL-safe slugs for persisted records.
ABOUTME: Re-exports the public API: options, generator, lifecycle adapter, and storage."""

__version__ = "0.1.0"

from sluggable.exceptions import InvalidOption, InvalidOptionKind, SluggableError, StorageError  # noqa: E402
from sluggable.generator import SlugGenerator  # noqa: E402
from sluggable.lifecycle import SlugLifecycle  # noqa: E402
from sluggable.models import Model  # noqa: E402
from sluggable.normalize import slugify  # noqa: E402
from sluggable.options import Derivation, FieldList, SlugOptions  # noqa: E402
from sluggable.storage import SqliteRecordStore  # noqa: E402

__all__ = [
    "Derivation",
    "FieldList",
    "InvalidOption",
    "InvalidOptionKind",
    "Model",
    "SlugGenerator",
    "SlugLifecycle",
    "SlugOptions",
    "SluggableError",
    "SqliteRecordStore",
    "StorageError",
    "__version__",
    "slugify",
]
