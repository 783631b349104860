"""Accumulating field-keyed soft validation problems."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(slots=True)
class ProblemMap:
    """Field name -> human readable message.

    A second problem for the same field is appended to the first message so
    no report is lost.
    """

    _messages: dict[str, list[str]] = field(default_factory=dict[str, list[str]])

    def add(self, field_name: str, message: str) -> None:
        messages = self._messages.setdefault(field_name, [])
        if message not in messages:
            messages.append(message)

    def merge(self, other: ProblemMap) -> None:
        for field_name, messages in other._messages.items():  # noqa: SLF001
            for message in messages:
                self.add(field_name, message)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._messages

    def __bool__(self) -> bool:
        return bool(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __getitem__(self, field_name: str) -> str:
        return " ".join(self._messages[field_name])

    def messages_for(self, field_name: str) -> tuple[str, ...]:
        return tuple(self._messages.get(field_name, ()))

    def as_dict(self) -> dict[str, str]:
        return {name: " ".join(messages) for name, messages in self._messages.items()}
