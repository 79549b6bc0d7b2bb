"""Errors raised by the export/import procedures.

Every failure is terminal for a run; the command-line entry point turns
these into a printed message and exit status 1.
"""


class MoverError(Exception):
    """Base class for errors that carry an operator-facing message."""


class UsageError(MoverError):
    pass


class DumpFileError(MoverError):
    pass


class StoreError(MoverError):
    """Redis communication failure, message is the client's error text."""


class ConflictError(MoverError):
    def __init__(self, message, key):
        super().__init__(message)
        self.key = key
