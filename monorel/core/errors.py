"""Process exit codes.

Every command maps its failure onto one of these values so CI stages can
tell a dirty checkout from a failed ``npm publish``.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    The numeric values are part of the CLI contract and must stay stable:
    - 0: Success
    - 1: User error (missing or invalid version argument)
    - 2: Precondition failed (dirty working tree, no release tag at HEAD)
    - 3: External tool failed (git, npm)
    - 4: Configuration error (unreadable or malformed monorel.toml)
    - 5: I/O error (malformed manifest or import map, write failure)
    """

    OK = 0
    USER_ERROR = 1
    PRECONDITION_ERROR = 2
    TOOL_ERROR = 3
    CONFIG_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
