"""Errors raised while reading publisher configuration."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class PublisherConfigError(ValueError):
    """Raised when a publisher configuration cannot be used.

    Attributes
    ----------
    key
        The configuration key at fault, when a single key is responsible.

    """

    def __init__(self, message: str, *, key: str | None = None) -> None:
        """Initialise with a message and the offending key."""
        self.key = key
        super().__init__(message)

    @classmethod
    def missing(cls, key: str, what: str) -> PublisherConfigError:
        """Return an error for a required setting that is absent or blank."""
        return cls(f"Failed to read {what} from the publisher settings", key=key)

    @classmethod
    def invalid_choice(
        cls, key: str, value: str, valid: cabc.Iterable[str]
    ) -> PublisherConfigError:
        """Return an error for a value outside an enumerated set."""
        options = ", ".join(f"'{option}'" for option in valid)
        return cls(
            f"Invalid value '{value}' for {key}. Valid options are: {options}",
            key=key,
        )

    @classmethod
    def unknown_key(cls, key: str) -> PublisherConfigError:
        """Return an error for an unrecognised publisher setting."""
        return cls(f"Unknown publisher setting '{key}'", key=key)


class WorkerConfigError(ValueError):
    """Raised when worker pool environment settings are invalid."""

    @classmethod
    def not_positive(cls, env_var: str, raw: str) -> WorkerConfigError:
        """Return an error for a non-positive or non-integer value."""
        return cls(f"{env_var} must be a positive integer, got: {raw!r}")
