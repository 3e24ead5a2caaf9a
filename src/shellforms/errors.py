from typing import Optional


class CompileError(Exception):
    def __init__(
        self,
        message: str,
        *,
        file: Optional[str] = None,
        line: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.file = file
        self.line = line

    def __str__(self) -> str:
        if self.file is None and self.line is None:
            return self.message
        file = self.file if self.file is not None else "<script>"
        if self.line is None:
            return f"{self.message} ({file})"
        return f"{self.message} ({file}:{self.line})"


class StructuralError(CompileError):
    """
    A form was given arguments it cannot be rendered from, for example an
    infix operator with a single operand.
    """


class InvalidIdentifier(CompileError):
    pass


class ExtensionResolutionError(CompileError):
    pass


class ParseError(CompileError):
    pass
