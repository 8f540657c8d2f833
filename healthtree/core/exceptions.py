"""Shared exceptions module."""

from typing import Optional


class HealthTreeException(Exception):
    """Base exception for healthtree."""

    pass


class InvalidRegistrationError(HealthTreeException):
    """Raised when a procedure cannot be bound at the requested path.

    Happens when the path descends through an existing leaf, or when its
    final segment already names a group of checks.
    """

    def __init__(self, path: str, message: Optional[str] = "Invalid registration"):
        """Create a new InvalidRegistrationError instance.

        Args:
        ----
            path (str): The path that was being registered.
            message (str, optional): The error message. Has default message.

        """
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class InvalidArgumentError(HealthTreeException, ValueError):
    """Raised for malformed arguments to the engine (empty path, bad timeout)."""

    def __init__(self, message: Optional[str] = "Invalid argument"):
        """Create a new InvalidArgumentError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class InvalidProcedureError(HealthTreeException, TypeError):
    """Raised when the object registered as a procedure is not callable."""

    def __init__(self, message: Optional[str] = "Procedure must be callable"):
        """Create a new InvalidProcedureError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class PromiseAlreadySettledError(HealthTreeException, RuntimeError):
    """Raised when a procedure signals completion more than once."""

    pass
