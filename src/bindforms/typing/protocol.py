"""Collaborator interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Awaitable, Sequence

    from bindforms.typing.models import SingleValidationResult, SubmitOptions


class CustomValidator(Protocol):
    """Author-supplied asynchronous check for one field value."""

    def __call__(self, value: Any) -> Awaitable[Any]:
        """Validate a value.

        Args:
            value: The exact value the check was requested for.

        Returns:
            Awaitable[Any]: A boolean, one result, or a sequence of results.
        """


class SubmitOperation(Protocol):
    """External operation that persists the cleaned subject."""

    def __call__(self, payload: dict[str, Any], options: SubmitOptions) -> Awaitable[None]:
        """Submit the payload.

        Args:
            payload: Subject with unbound fields stripped.
            options: Submission options.

        Returns:
            Awaitable[None]: Resolves on success, raises on rejection.
        """


class ModalContext(Protocol):
    """Owning modal dialog, if the form lives in one."""

    def request_close(self) -> None:
        """Ask the surrounding dialog to close."""


class FocusTarget(Protocol):
    """Element that can take focus back."""

    def focus(self) -> None:
        """Move focus onto this element."""


class FocusManager(Protocol):
    """Reports the element that currently has focus."""

    def active_element(self) -> FocusTarget | None:
        """Return the focused element, if any."""


class ConfirmationPrompt(Protocol):
    """Shows the warnings confirmation prompt."""

    def __call__(self, warnings: Sequence[SingleValidationResult]) -> None:
        """Display the prompt.

        Args:
            warnings: Failing warning-severity results the user must accept.
        """
