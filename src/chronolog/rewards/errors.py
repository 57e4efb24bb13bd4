"""Reward engine exceptions. Routers map each one to an HTTP status."""

from __future__ import annotations


class RewardError(Exception):
    """Base class for reward engine failures."""


class ActivityNotFoundError(RewardError):
    """Activity missing, deleted, or not owned by the caller."""

    def __init__(self, activity_id: int) -> None:
        self.activity_id = activity_id
        super().__init__(f"Activity {activity_id} not found")


class NothingToClaimError(RewardError):
    """No completed interval is waiting to be claimed."""

    message = "No rewards available. Keep tracking time!"

    def __init__(self, progress: float) -> None:
        self.progress = progress
        super().__init__(self.message)


class GenerationUnavailableError(RewardError):
    """The catalog has nothing to draw for the chosen reward type.

    Usually means the catalog has not been loaded yet; retry after a refresh.
    """

    def __init__(self, reward_type: str) -> None:
        self.reward_type = reward_type
        super().__init__(f"No {reward_type} available in the catalog")


class StorageFailureError(RewardError):
    """Persisting a claim failed; the transaction was rolled back."""
