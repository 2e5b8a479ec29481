from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.exceptions import InvalidConfigurationError


@dataclass(frozen=True)
class PdtvState:
    """Confirmation numbering settings.

    ``last``/``penultimate`` are operation ordinals that receive the final two
    numbers of the run whatever their position in the list.
    """

    first_id: str = ""
    last: Optional[int] = None
    penultimate: Optional[int] = None
    auto: bool = False

    def __post_init__(self):
        if self.penultimate is not None and self.last is None:
            raise InvalidConfigurationError("Penultimate operation requires a last operation")
        if (self.last is not None or self.penultimate is not None) and not self.auto:
            raise InvalidConfigurationError("Auto numbering cannot be disabled while last/penultimate is set")
        if self.last is not None and self.last == self.penultimate:
            raise InvalidConfigurationError("Last and penultimate must be different operations")

    @property
    def first_number(self) -> Optional[int]:
        text = (self.first_id or "").strip()
        if not text.isdigit():
            return None
        return int(text)

    @property
    def numbered(self) -> bool:
        """True when a numeric run is configured."""
        return self.first_number is not None
