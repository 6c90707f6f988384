# ABOUTME: Structural interfaces for the collaborators slug generation depends on.
# ABOUTME: Any record or store satisfying these protocols works, no inheritance required.

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sluggable.options import SlugOptions


@runtime_checkable
class SluggableRecord(Protocol):
    def get_slug_options(self) -> "SlugOptions": ...

    def get_field(self, name: str) -> Any: ...

    def set_field(self, name: str, value: Any) -> None: ...

    def get_original_field(self, name: str) -> Any: ...

    def get_primary_key(self) -> Any: ...

    def get_record_type(self) -> str: ...

    def supports_soft_delete(self) -> bool: ...


@runtime_checkable
class SlugStore(Protocol):
    def exists_other_with_field_value(
        self,
        record_type: str,
        field_name: str,
        value: str,
        exclude_key: Any,
        include_trashed: bool,
    ) -> bool: ...


class Normalizer(Protocol):
    def __call__(self, text: str) -> str: ...
