"""ABOUTME: Binds slug generation to record create/update notifications.
ABOUTME: Honors the on-create/on-update flags and exposes an explicit generate entry point."""

from typing import Protocol

from sluggable.generator import SlugGenerator
from sluggable.protocols import SluggableRecord, SlugStore


class LifecycleEvents(Protocol):
    """Persistence layer that notifies listeners before records are written."""

    def on_creating(self, callback: "RecordCallback") -> None: ...

    def on_updating(self, callback: "RecordCallback") -> None: ...


class RecordCallback(Protocol):
    def __call__(self, record: SluggableRecord) -> None: ...


class SlugLifecycle:
    """React to "about to create" and "about to update" notifications.

    Args:
        generator: Generator that performs the actual slugging.
    """

    def __init__(self, generator: SlugGenerator) -> None:
        self.generator = generator

    @classmethod
    def for_store(cls, store: SlugStore) -> "SlugLifecycle":
        """Build an adapter whose generator checks collisions against `store`."""
        return cls(SlugGenerator(store))

    def attach(self, events: LifecycleEvents) -> "SlugLifecycle":
        """Register the create and update hooks with `events` and return self."""
        events.on_creating(self.before_create)
        events.on_updating(self.before_update)
        return self

    def before_create(self, record: SluggableRecord) -> None:
        options = record.get_slug_options()
        if not options.generate_slugs_on_create:
            return
        self.generator.add_slug(record, options)

    def before_update(self, record: SluggableRecord) -> None:
        options = record.get_slug_options()
        if not options.generate_slugs_on_update:
            return
        self.generator.add_slug(record, options)

    def generate_slug(self, record: SluggableRecord) -> None:
        """Generate a slug on explicit request, ignoring the lifecycle flags."""
        self.generator.generate_slug(record)
