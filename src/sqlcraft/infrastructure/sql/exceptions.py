"""
Exceptions raised by the query builders.

Builder errors signal a programming mistake (an operation invoked in a
state where it cannot apply). They are raised before any I/O and are
never retried.
"""

from typing import Optional


class BuilderUsageError(Exception):
    """
    Raised when a builder operation is invoked in an invalid state.

    Args:
        message: Error description
        operation: Name of the builder operation that was refused (optional)
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation

        if operation:
            full_message = f"{message} (operation='{operation}')"
        else:
            full_message = message

        super().__init__(full_message)
