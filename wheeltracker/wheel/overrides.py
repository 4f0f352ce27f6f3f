"""Tagged override values.

An override is either ``Some(value)`` or ``USE_DEFAULT``. Consumers call
``resolve`` with the fallback so the default-vs-override decision is
always explicit instead of hiding behind a nullable field.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Some(Generic[T]):
    """An explicit override value."""

    value: T

    def resolve(self, default: T) -> T:
        return self.value

    @property
    def is_set(self) -> bool:
        return True


class UseDefault:
    """No override; the caller's default applies."""

    _instance: Optional["UseDefault"] = None

    def __new__(cls) -> "UseDefault":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def resolve(self, default):
        return default

    @property
    def is_set(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "USE_DEFAULT"


USE_DEFAULT = UseDefault()

Override = Union[Some[T], UseDefault]


def from_optional(value: Optional[T]) -> "Override[T]":
    """Lift a nullable value (e.g. a request field or DB column) to an override."""
    return USE_DEFAULT if value is None else Some(value)


def to_optional(override: "Override[T]") -> Optional[T]:
    """Lower an override back to a nullable value for storage."""
    return override.value if isinstance(override, Some) else None
