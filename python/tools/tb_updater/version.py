"""Release version value type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, order=True)
class Version:
    """
    A ``major.minor.patch`` release number.

    Instances are immutable and ordered lexicographically on
    ``(major, minor, patch)``. ``Version.zero()`` stands for "nothing
    installed" and sorts before every real release.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0

    def __post_init__(self) -> None:
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an int, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    @classmethod
    def zero(cls) -> Version:
        return cls(0, 0, 0)

    @classmethod
    def parse(cls, text: str) -> Optional[Version]:
        """
        Parse ``M.m.p`` into a Version.

        Returns None for anything that is not exactly three dot-separated
        ASCII decimal fields. Signs, whitespace and underscores are
        rejected; leading zeros are accepted.

        Example:
            >>> Version.parse("115.3.1")
            Version(major=115, minor=3, patch=1)
            >>> Version.parse("115.0b2") is None
            True
        """
        parts = text.split(".")
        if len(parts) != 3:
            return None
        if not all(part.isascii() and part.isdigit() for part in parts):
            return None
        major, minor, patch = (int(part) for part in parts)
        return cls(major, minor, patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __bool__(self) -> bool:
        return self != Version.zero()

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)


def compare_versions(a: Version, b: Version) -> int:
    """
    Compare two versions.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b
    """
    if a < b:
        return -1
    elif a > b:
        return 1
    else:
        return 0
