# ABOUTME: Attribute-dict record base that satisfies the SluggableRecord protocol.
# ABOUTME: Tracks original (last persisted) values so custom slugs can be detected.

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from sluggable.options import SlugOptions

PRIMARY_KEY = "id"


class Model(ABC):
    """A record whose fields live in a plain dict.

    Subclasses set `table` (defaults to the lowercased class name), opt into
    soft deletion with `soft_deletes`, and implement `get_slug_options`.

    Attributes:
        attributes: Current field values.
        original: Field values as of the last save or load, empty until then.
    """

    table: ClassVar[str] = ""
    soft_deletes: ClassVar[bool] = False

    def __init__(self, **attributes: Any) -> None:
        self.attributes: dict[str, Any] = dict(attributes)
        self.original: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.attributes!r})"

    @abstractmethod
    def get_slug_options(self) -> SlugOptions:
        """Return the options used to generate this record's slug."""

    def get_field(self, name: str) -> Any:
        return self.attributes.get(name)

    def set_field(self, name: str, value: Any) -> None:
        self.attributes[name] = value

    def get_original_field(self, name: str) -> Any:
        return self.original.get(name)

    def get_primary_key(self) -> Any:
        """Return the persisted key, None until the record has been saved."""
        return self.original.get(PRIMARY_KEY)

    @classmethod
    def record_type(cls) -> str:
        return cls.table or cls.__name__.lower()

    def get_record_type(self) -> str:
        return self.record_type()

    def supports_soft_delete(self) -> bool:
        return self.soft_deletes

    @property
    def exists(self) -> bool:
        """Whether the record has been persisted."""
        return self.original.get(PRIMARY_KEY) is not None

    @property
    def trashed(self) -> bool:
        return self.soft_deletes and self.attributes.get("deleted_at") is not None

    def dirty_fields(self) -> dict[str, Any]:
        """Return the fields whose value differs from the original."""
        return {
            name: value
            for name, value in self.attributes.items()
            if name not in self.original or self.original[name] != value
        }

    def sync_original(self) -> None:
        """Mark the current attribute values as persisted."""
        self.original = dict(self.attributes)
