"""ABOUTME: Slug generation options and the guard that validates them.
ABOUTME: SlugOptions is immutable; fluent builders return modified copies."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Union

from sluggable.exceptions import InvalidOption
from sluggable.settings import settings

if TYPE_CHECKING:
    from sluggable.protocols import SluggableRecord


@dataclass(frozen=True)
class FieldList:
    """Build the slug source by joining the named fields with a hyphen.

    Attributes:
        names: Field names in the order they are joined.
    """

    names: tuple[str, ...] = ()


@dataclass(frozen=True)
class Derivation:
    """Build the slug source by calling a function with the record.

    Attributes:
        function: Callable receiving the record and returning the source string.
    """

    function: Callable[["SluggableRecord"], Any]


SlugSource = Union[FieldList, Derivation]


def _default_maximum_length() -> int:
    return settings.DEFAULT_MAXIMUM_LENGTH


@dataclass(frozen=True)
class SlugOptions:
    """Configuration for one slug generation request.

    Record types build a fresh instance from ``get_slug_options()`` on every call.

    Attributes:
        source: Where the slug is derived from, a FieldList or a Derivation.
        slug_field: Name of the field that receives the generated slug.
        maximum_length: Character cap applied to the source string before normalization.
        generate_unique_slugs: Resolve collisions with sibling records by suffixing.
        generate_slugs_on_create: Generate automatically before a record is created.
        generate_slugs_on_update: Generate automatically before a record is updated.
    """

    source: SlugSource = field(default_factory=FieldList)
    slug_field: str = ""
    maximum_length: int = field(default_factory=_default_maximum_length)
    generate_unique_slugs: bool = True
    generate_slugs_on_create: bool = True
    generate_slugs_on_update: bool = True

    @classmethod
    def create(cls) -> "SlugOptions":
        """Return options with default values, ready for the fluent builders."""
        return cls()

    def generate_slugs_from(self, *field_names: str | Sequence[str]) -> "SlugOptions":
        """Derive the slug from the given fields, joined in order.

        Accepts the names as separate arguments or as a single list or tuple.
        """
        if len(field_names) == 1 and isinstance(field_names[0], (list, tuple)):
            field_names = tuple(field_names[0])
        return replace(self, source=FieldList(tuple(field_names)))

    def generate_slugs_using(self, function: Callable[["SluggableRecord"], Any]) -> "SlugOptions":
        """Derive the slug from the string returned by `function`."""
        return replace(self, source=Derivation(function))

    def save_slugs_to(self, slug_field: str) -> "SlugOptions":
        return replace(self, slug_field=slug_field)

    def allow_duplicate_slugs(self) -> "SlugOptions":
        return replace(self, generate_unique_slugs=False)

    def slugs_should_be_no_longer_than(self, maximum_length: int) -> "SlugOptions":
        return replace(self, maximum_length=maximum_length)

    def do_not_generate_slugs_on_create(self) -> "SlugOptions":
        return replace(self, generate_slugs_on_create=False)

    def do_not_generate_slugs_on_update(self) -> "SlugOptions":
        return replace(self, generate_slugs_on_update=False)


def guard_against_invalid_slug_options(options: SlugOptions) -> None:
    """Raise InvalidOption when any of the options is missing or invalid.

    Args:
        options: The options about to be used for slug generation.

    Raises:
        InvalidOption: With kind missing-from-field, missing-slug-field or invalid-maximum-length.
    """
    if isinstance(options.source, FieldList) and not options.source.names:
        raise InvalidOption.missing_from_field()

    if not options.slug_field:
        raise InvalidOption.missing_slug_field()

    if options.maximum_length <= 0:
        raise InvalidOption.invalid_maximum_length()
