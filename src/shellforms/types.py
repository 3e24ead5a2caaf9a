from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Location:
    offset: int
    lineno: int
    column: int

    def __str__(self) -> str:
        # Line and column are both counted from zero internally.
        return f"{self.lineno + 1}:{self.column + 1}"
