"""
Custom exception classes for maintenance operations.

Provides hierarchical exception handling for granular error categorization
of precondition, stage and collaborator failures.
"""


class UpkeepError(Exception):
    """Base exception for all maintenance-related errors"""

    def __init__(self, message: str, remediation: str = None):
        self.message = message
        self.remediation = remediation
        super().__init__(self.message)


class PreconditionError(UpkeepError):
    """Raised when the run cannot start; nothing has been mutated yet"""

    pass


class PrivilegeError(PreconditionError):
    """Raised when administrator privilege cannot be confirmed"""

    pass


class ScopeResolutionError(PreconditionError):
    """Raised when a scope does not map to a stage list"""

    pass


class ConfigurationError(PreconditionError):
    """Raised when settings or run options are invalid"""

    pass


class CommandError(UpkeepError):
    """Raised when an external command cannot be executed"""

    pass


class CommandNotFoundError(CommandError):
    """Raised when the executable for an external command is missing"""

    pass


class StageError(UpkeepError):
    """Raised by a stage action when its work failed"""

    pass


class CheckpointError(UpkeepError):
    """Raised when a restore point cannot be created or queried"""

    pass


class SchedulingError(UpkeepError):
    """Raised when the recurring task cannot be registered"""

    pass


class ReportDeliveryError(UpkeepError):
    """Raised when the run report cannot be delivered"""

    pass
