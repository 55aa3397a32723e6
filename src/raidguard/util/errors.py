"""Exception types raised by the raidguard service layer.

The detection and rollback cores never raise for well-typed input; these
exceptions only surface from the async workflows that talk to collaborators.
"""


class RaidGuardError(Exception):
    """Base class for all raidguard errors."""


class RollbackError(RaidGuardError):
    """A rollback could not be completed because a collaborator failed.

    Attributes:
        server_id: Server the rollback was requested for.
        target_user_id: Actor whose commands were being reversed.
        queued: Number of reversal commands already queued before the failure.
    """

    def __init__(self, message: str, *, server_id: str, target_user_id: str, queued: int = 0) -> None:
        super().__init__(message)
        self.server_id = server_id
        self.target_user_id = target_user_id
        self.queued = queued
