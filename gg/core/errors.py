"""Error codes for CLI exit status.

Only program-level failures map to a non-zero exit code. A repository that
fails to answer a query is part of the report, not an error of the program.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success (even if some repositories reported findings or failures)
    - 1: User error (unknown subcommand, bad arguments)
    - 2: Configuration error (scan root missing, invalid config file)
    - 5: I/O error (config file could not be written)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    IO_ERROR = 5
