"""Failure categories raised by the pipeline."""

from pathlib import Path


class MalformedRecordError(ValueError):
    """An input record could not be parsed.

    Attributes:
        path: File the record was read from
        line_number: 1-based line number of the record, None when the
            reader reports no position
        record: Offending raw line (truncated to 120 characters)
    """

    def __init__(self, path: Path | str, line_number: int | None, record: str, reason: str):
        self.path = Path(path)
        self.line_number = line_number
        self.record = record[:120]
        self.reason = reason
        if line_number is None:
            message = f"{self.path.name}: {reason}"
        else:
            message = f"{self.path.name}:{line_number}: {reason} (record: {self.record!r})"
        super().__init__(message)


class ReferentialIntegrityError(ValueError):
    """An identifier referenced by one table is absent from another."""

    def __init__(self, identifier, table: str, referenced_by: str):
        self.identifier = identifier
        self.table = table
        self.referenced_by = referenced_by
        super().__init__(
            f"{identifier!r} is referenced by {referenced_by} but missing from {table}"
        )


class ExternalToolError(RuntimeError):
    """A statistics or rendering collaborator failed.

    The diagnostic carries whatever the tool reported. Results computed
    before the failure stay valid.
    """

    def __init__(self, tool: str, diagnostic: str):
        self.tool = tool
        self.diagnostic = diagnostic
        super().__init__(f"{tool} failed: {diagnostic}")
