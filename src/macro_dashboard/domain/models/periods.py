"""Quarter and month period keys."""

import re
from dataclasses import dataclass

_QUARTER_RE = re.compile(r"^\s*(\d{4})\s*-?\s*Q([1-4])\s*$", re.IGNORECASE)
_MONTH_RE = re.compile(r"^\s*(\d{4})-(\d{2})\s*$")

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


@dataclass(frozen=True, order=True)
class Quarter:
    """
    Calendar quarter key, ordered by (year, quarter).

    Text form is "2024Q1".
    """

    year: int
    quarter: int

    def __post_init__(self) -> None:
        if not 1 <= self.quarter <= 4:
            raise ValueError(f"Quarter must be 1-4, got {self.quarter}")

    @classmethod
    def parse(cls, value: str) -> "Quarter":
        """Parse "2024Q1" (also accepts "2024-Q1")."""
        match = _QUARTER_RE.match(value or "")
        if not match:
            raise ValueError(f"Invalid quarter key: {value!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    def next(self) -> "Quarter":
        """Return the following calendar quarter."""
        if self.quarter == 4:
            return Quarter(self.year + 1, 1)
        return Quarter(self.year, self.quarter + 1)

    def previous(self) -> "Quarter":
        """Return the preceding calendar quarter."""
        if self.quarter == 1:
            return Quarter(self.year - 1, 4)
        return Quarter(self.year, self.quarter - 1)

    def __str__(self) -> str:
        return f"{self.year}Q{self.quarter}"


@dataclass(frozen=True, order=True)
class Month:
    """
    Calendar month key, ordered by (year, month).

    Text form is "2024-03", which also sorts lexicographically.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be 1-12, got {self.month}")

    @classmethod
    def parse(cls, value: str) -> "Month":
        """Parse "2024-03"."""
        match = _MONTH_RE.match(value or "")
        if not match:
            raise ValueError(f"Invalid month key: {value!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    @property
    def label(self) -> str:
        """Human period label, e.g. "Mar 2024"."""
        return f"{MONTH_ABBREVIATIONS[self.month - 1]} {self.year}"

    def __str__(self) -> str:
        return f"{self.year}-{self.month:02d}"
