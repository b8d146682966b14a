# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

__all__ = (
    "PinnableError",
    "IndexOutOfRangeError",
    "ReplayError",
    "TypeCoercionError",
)


class PinnableError(Exception):
    default_message: ClassVar[str] = "pinnable error"
    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> Exception | None:
        """Get the cause of this error, if any."""
        return self.__cause__ if hasattr(self, "__cause__") else None


class IndexOutOfRangeError(PinnableError, IndexError):
    """Raised when an index falls outside the collection bounds."""

    default_message = "Index out of range"
    __slots__ = ()

    @classmethod
    def from_index(
        cls, index: Any, length: int, *, upper: int | None = None
    ) -> "IndexOutOfRangeError":
        """Build the error for ``index`` against a collection of ``length``.

        ``upper`` is the largest valid index and defaults to ``length - 1``.
        """
        upper = length - 1 if upper is None else upper
        return cls(
            f"index {index!r} out of range [0, {upper}]",
            details={"index": index, "length": length},
        )


class ReplayError(PinnableError):
    """Raised when ``reset()`` cannot replay the action log."""

    default_message = "Action log replay failed"
    __slots__ = ()


class TypeCoercionError(PinnableError, TypeError):
    """Raised when the item type rejects a value."""

    default_message = "Type coercion failed"
    __slots__ = ()

    @classmethod
    def from_value(
        cls,
        value: Any,
        *,
        expected: type,
        cause: Exception | None = None,
    ) -> "TypeCoercionError":
        details = {
            "value": value,
            "type": type(value).__name__,
            "expected": expected.__name__,
        }
        return cls(
            f"cannot coerce {type(value).__name__} into {expected.__name__}",
            details=details,
            cause=cause,
        )
