from __future__ import annotations


class FindError(Exception):
    """A fatal condition. The run stops and the process exits non-zero."""

    exit_code = 1


class UsageError(FindError):
    """The command line does not describe a valid search."""

    exit_code = 2


class PathTooLongError(FindError):
    def __init__(self, path: str, limit: int) -> None:
        super().__init__(f"maximum path length ({limit}) exceeded: {path}")
        self.path = path
        self.limit = limit


def failure_message(operation: str, path: str, err: OSError) -> str:
    return f'{operation}("{path}") failed: {err.strerror or err}'


def os_failure(operation: str, path: str, err: OSError) -> FindError:
    return FindError(failure_message(operation, path, err))
