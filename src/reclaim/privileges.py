"""Elevated deletion capability.

The cleaner never prompts for administrator rights itself. When moving an
item to the trash fails with a permission error it hands the path, once, to
an ElevatedExecutor supplied by the caller (an admin prompt, a privileged
helper, ...).
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

log = logging.getLogger(__name__)


class PrivilegeError(Exception):
    """Raised when an elevated operation is refused or fails."""


@runtime_checkable
class ElevatedExecutor(Protocol):
    """Runs a recoverable deletion with elevated rights."""

    def trash(self, path: str) -> bool:
        """Move *path* to the trash; return True on success.

        Implementations may raise PrivilegeError when the user cancels or
        authentication fails. Callers treat any exception as a failed
        removal.
        """
        ...


def trash_elevated(executor: ElevatedExecutor | None, path: str) -> bool:
    """Attempt an elevated trash of *path*, absorbing any failure."""
    if executor is None:
        return False

    try:
        return bool(executor.trash(path))
    except PrivilegeError as e:
        log.warning("Elevated removal of %s refused: %s", path, e)
    except OSError as e:
        log.warning("Elevated removal of %s failed: %s", path, e)
    return False
