"""Custom exceptions for the IOU ledger."""


class IouLedgerError(Exception):
    """Base exception for all IOU ledger errors."""

    pass


class ConfigurationError(IouLedgerError):
    """Raised when there is a configuration error."""

    pass


class ApiClientError(IouLedgerError):
    """Raised when a Baserow or Beeminder API call fails."""

    pass


class ParsingError(IouLedgerError):
    """Raised when input parsing fails."""

    pass


class MalformedEntryError(ParsingError):
    """Raised when a line starting with ``iou[`` does not match the entry grammar."""

    def __init__(self, line: str, line_number: int) -> None:
        self.line = line
        self.line_number = line_number
        super().__init__(f"Invalid line format (line {line_number}): {line}")


class OutputError(IouLedgerError):
    """Raised when writing output fails."""

    pass
