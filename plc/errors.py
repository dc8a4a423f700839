from typing import Optional


class PlcError(Exception):
    """Base class for every error raised by the toolchain."""
    kind = 'Error'

    def __init__(self, message: str, offset: Optional[int] = None):
        text = f"{self.kind}: {message}"
        if offset is not None:
            text += f" (at offset {offset})"
        super().__init__(text)
        self.message = message
        self.offset = offset


class ParseError(PlcError):
    """Grammar or token violation, anchored at a source offset."""
    kind = 'SyntaxError'

    def __init__(self, message: str, offset: int):
        super().__init__(message, offset)


class AnalysisError(PlcError):
    """Raised by the analyzer when a program is ill-typed."""
    kind = 'TypeError'


class PlcRuntimeError(PlcError):
    """Raised by the interpreter when a runtime precondition is violated."""
    kind = 'RuntimeError'
