"""External provider and subject identifier value objects.

Both wrap a single string and compare by value, so they can be used as
dictionary keys when resolving OAuth clients and when checking link
uniqueness.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExternalProvider:
    """Normalized name of an external identity provider (e.g. "google").

    Input is trimmed and lower-cased, so "Google " and "google" are the same
    provider.
    """

    value: str

    def __post_init__(self):
        if self.value is None or not self.value.strip():
            raise ValueError("External provider cannot be empty")
        object.__setattr__(self, "value", self.value.strip().lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExternalSubjectId:
    """The provider's stable identifier for an account.

    Trimmed but otherwise kept verbatim; subject ids are case-sensitive.
    """

    value: str

    def __post_init__(self):
        if self.value is None or not self.value.strip():
            raise ValueError("External subject id cannot be empty")
        object.__setattr__(self, "value", self.value.strip())

    def __str__(self) -> str:
        return self.value
