from __future__ import annotations
import copy
from typing import Any, Iterable, List, Optional


class DemoError(Exception):
    """Base class for every error raised by democast."""

    pass


class ScenarioError(DemoError):
    """Scenario file is unreadable, malformed, or logically invalid.

    Raised before any browser is launched. ``issues`` holds one
    ``"path: message"`` string per problem found.
    """

    def __init__(self, message: str, issues: Iterable[str] = ()):
        super().__init__(message)
        self.issues: List[str] = list(issues)

    def __str__(self) -> str:
        if not self.issues:
            return self.args[0]
        details = "\n".join(f"  - {issue}" for issue in self.issues)
        return f"{self.args[0]}\n{details}"


class CaptureFailure(DemoError):
    """A failure during recording that may carry the frames captured so far."""

    def __init__(self, message: str, *, partial_session: Optional[Any] = None):
        super().__init__(message)
        self.partial_session = partial_session

    def with_partial_session(self, session: Any) -> "CaptureFailure":
        """Return a copy of this error carrying ``session`` as its payload."""
        clone = copy.copy(self)
        clone.partial_session = session
        return clone


class ActionExecutionError(CaptureFailure):
    """A scripted action could not be performed."""

    def __init__(
        self,
        message: str,
        *,
        action: Optional[str] = None,
        selector: Optional[str] = None,
        partial_session: Optional[Any] = None,
    ):
        super().__init__(message, partial_session=partial_session)
        self.action = action
        self.selector = selector


class ElementNotFound(ActionExecutionError):
    """Selector did not resolve to a visible element within the timeout."""

    pass


class InvalidSelector(ActionExecutionError):
    """Selector contains characters outside the safe selector charset."""

    pass


class NavigationError(ActionExecutionError):
    """Page navigation failed or never became ready."""

    pass


class CaptureError(CaptureFailure):
    """The continuous screen sample channel failed."""

    pass


class EncodingError(DemoError):
    """Base class for output encoding failures."""

    pass


class EncoderNotFound(EncodingError):
    """The external encoder binary is not installed or not on PATH."""

    def __init__(self, binary: str):
        super().__init__(f"{binary} not found on PATH")
        self.binary = binary


class EncoderFailed(EncodingError):
    """The external encoder exited with a non-zero status."""

    def __init__(self, binary: str, returncode: int, stderr_tail: str = ""):
        super().__init__(f"{binary} exited with code {returncode}")
        self.binary = binary
        self.returncode = returncode
        self.stderr_tail = stderr_tail


class ResourceError(DemoError):
    """Launching or tearing down a browser session failed."""

    def __init__(self, message: str, *, resource: str = "browser"):
        super().__init__(message)
        self.resource = resource
