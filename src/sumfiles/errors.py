class SumfilesError(Exception):
    """Base class for errors raised by sumfiles."""


class WalkError(SumfilesError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path: str = path
        self.reason: str = reason


class LineCountError(SumfilesError):
    pass


class TooManyErrorsError(SumfilesError):
    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"{count} files failed processing (limit {limit})")
        self.count: int = count
        self.limit: int = limit
