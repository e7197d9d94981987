"""Dotted version numbers (``major.minor[.build[.revision]]``)."""

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Version:
    """A version number with two to four numeric components.

    Missing ``build``/``revision`` components are ``-1`` and sort before any
    explicit value, so ``1.2 < 1.2.0``.
    """

    major: int
    minor: int
    build: int = -1
    revision: int = -1

    def __post_init__(self) -> None:
        if self.major < 0 or self.minor < 0:
            raise ValueError("Version components must not be negative")
        if self.build < -1 or self.revision < -1:
            raise ValueError("Version components must not be negative")
        if self.build == -1 and self.revision != -1:
            raise ValueError("Version revision requires a build component")

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse ``"1.2"``, ``"1.2.3"`` or ``"1.2.3.4"``.

        Raises:
            ValueError: If the text is not a version number
        """
        parts = text.strip().split(".")
        if not 2 <= len(parts) <= 4:
            raise ValueError(f"'{text}' is not a version number")
        numbers = []
        for part in parts:
            if not (part.isascii() and part.isdigit()):
                raise ValueError(f"'{text}' is not a version number")
            numbers.append(int(part))
        return cls(*numbers)

    def __str__(self) -> str:
        parts = [self.major, self.minor]
        if self.build != -1:
            parts.append(self.build)
            if self.revision != -1:
                parts.append(self.revision)
        return ".".join(str(p) for p in parts)
