class CopyApplicationError(Exception):
    """Base class for errors raised by the copy application engine."""


class DuplicateIdentifier(CopyApplicationError):
    """A G-Number was issued twice. Indicates a broken allocator."""

    def __init__(self, g_number):
        self.g_number = g_number
        super().__init__(f"G-Number {g_number} has already been issued")


class InvalidTransition(CopyApplicationError):
    """The requested status change is not an allowed edge."""

    def __init__(self, current_status, target_status, reason=None):
        self.current_status = current_status
        self.target_status = target_status
        self.reason = reason or "transition not allowed"
        super().__init__(
            f"Cannot move from '{current_status}' to '{target_status}': {self.reason}"
        )


class MissingPrerequisite(CopyApplicationError):
    """A stage action was attempted before the stage record it depends on exists."""

    def __init__(self, dependency, application=None):
        self.dependency = dependency
        self.application = application
        label = f" for {application.g_number}" if application is not None else ""
        super().__init__(f"Missing prerequisite '{dependency}'{label}")


class AllocationFailure(CopyApplicationError):
    """The year's G-Number counter could not be incremented."""

    def __init__(self, year, cause=None):
        self.year = year
        self.cause = cause
        super().__init__(f"Could not allocate a G-Number for {year}: {cause}")
