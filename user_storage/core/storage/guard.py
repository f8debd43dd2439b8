"""Read-only enforcement for every mutating entry point."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Union

from .exceptions import ReadOnlyException
from .models import ComponentModel

READ_ONLY_OPTION = "readOnly"

ConfigSource = Union[ComponentModel, Mapping[str, Union[str, Sequence[str], None]], None]


def _first_value(config: ConfigSource, key: str) -> Optional[str]:
    if config is None:
        return None
    if isinstance(config, ComponentModel):
        return config.get(key)
    value = config.get(key)
    if value is None or isinstance(value, str):
        return value
    return value[0] if value else None


@dataclass(frozen=True)
class ReadOnlyGuard:
    """Immutable read-only flag captured when a provider is built.

    The policy is: read-only unless ``readOnly`` is configured with a value
    other than the literal ``"true"``. Absent configuration is read-only.
    """
    read_only: bool = True

    @classmethod
    def from_config(cls, config: ConfigSource) -> "ReadOnlyGuard":
        """Derive the guard from a component model or a plain config mapping.

        Args:
            config: ComponentModel, ``{name: value}`` or ``{name: [values]}``

        Returns:
            ReadOnlyGuard with the resolved flag
        """
        value = _first_value(config, READ_ONLY_OPTION)
        return cls(read_only=value is None or value == "true")

    def check(self, message: str = "User is read-only") -> None:
        """Raise ReadOnlyException when read-only is active.

        Raises:
            ReadOnlyException: If the provider is read-only
        """
        if self.read_only:
            raise ReadOnlyException(message)
