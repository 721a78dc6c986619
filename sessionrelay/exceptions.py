"""Exception hierarchy for sessionrelay."""


class RelayError(Exception):
    """Base exception for the session relay."""


class SourceLoginError(RelayError):
    """Raised when a pull source cannot log in. Fatal at startup."""

    def __init__(self, source_id: str, reason: str):
        super().__init__(f"Login failed for source '{source_id}': {reason}")
        self.source_id = source_id
        self.reason = reason


class NotificationError(RelayError):
    """Raised by a notification sink when delivery fails."""


class ContainerControlError(RelayError):
    """Raised when a container runtime command fails."""


class UnknownInstanceError(RelayError):
    """Raised when a command names an instance that is not configured."""

    def __init__(self, instance: str):
        super().__init__(f"Unknown instance '{instance}'")
        self.instance = instance
