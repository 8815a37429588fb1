"""
Exception hierarchy for the guardian alert flow.

Abort-class errors carry the toast and status texts shown to the user when a
dispatch stops early; the orchestrator catches them once at its boundary.
"""
from __future__ import annotations


class GuardianError(Exception):
    """Base exception for all guardian errors."""

    toast: str = "Something went wrong"
    status: str = "Error"

    def __init__(self, message: str | None = None, *, toast: str | None = None, status: str | None = None) -> None:
        if toast is not None:
            self.toast = toast
        if status is not None:
            self.status = status
        super().__init__(message or self.toast)


class NoContactConfigured(GuardianError):
    """The category being dispatched has no stored phone number."""

    status = "No contact"

    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(f"No {label} number set", toast=f"No {label} number set")


class PermissionDenied(GuardianError):
    """Location permission resolved Denied."""

    toast = "Location permission required"
    status = "Permission denied"


class LocationUnavailable(GuardianError):
    """A position fix timed out or the provider reported an error."""

    toast = "Could not get your location"
    status = "Location unavailable"


class UserCancelled(GuardianError):
    """The user declined the confirmation prompt."""

    toast = "Cancelled"
    status = "Cancelled"


class RemoteFeedWriteFailed(GuardianError):
    """A write to the live-location feed failed. Logged, never surfaced."""

    toast = "Live location update failed"
    status = "Feed write failed"


class ActuatorInvocationFailed(GuardianError):
    """The platform refused a dial or messaging handoff. Not observable by callers."""


class InvalidContact(GuardianError):
    """A contact number entered in settings did not validate."""

    toast = "Invalid phone number"
    status = "Invalid contact"


class FeedResponseError(Exception):
    """Raised when the feed's HTTP API answers with an error payload."""

    def __init__(self, error_json: dict):
        self.error_json = error_json
        super().__init__(f"Feed error: {error_json}")
