"""Form state container.

``reduce`` is the pure transition function over the closed action set. ``FormStore``
owns the current snapshot, applies dispatched actions and notifies subscribers. Field
subscribers only hear about changes to their own slice (value, result, flags), detected
by identity since every transition shares untouched branches with the previous state.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, NamedTuple

from bindforms import field_path, logger
from bindforms.typing.enums import FormActionKind
from bindforms.typing.models import (
    FormState,
    InteractionFlags,
    SingleValidationResult,
    ValidationResult,
)

if TYPE_CHECKING:
    from bindforms.typing.models import FormAction
    from bindforms.typing.models.actions import (
        BackendValidationArrived,
        FieldFocused,
        FieldInitialized,
        FieldLostFocus,
        FieldRemoved,
        FieldValidated,
        FieldValueChanged,
        Reset,
    )

StateListener = Callable[[FormState], None]


class FieldSlice(NamedTuple):
    """The part of the state one bound field reads."""

    value: Any
    validation_result: ValidationResult | None
    interaction_flags: InteractionFlags | None

    def same_as(self, other: FieldSlice) -> bool:
        """Return whether both slices hold the very same objects."""
        return (
            self.value is other.value
            and self.validation_result is other.validation_result
            and self.interaction_flags is other.interaction_flags
        )


FieldListener = Callable[[FieldSlice], None]


def _set_flags(state: FormState, path: str, **changes: Any) -> dict[str, InteractionFlags]:
    flags = dict(state.interaction_flags)
    flags[path] = flags[path].model_copy(update=changes)
    return flags


def _strip_backend(results: dict[str, ValidationResult]) -> dict[str, ValidationResult]:
    stripped: dict[str, ValidationResult] = {}
    for path, result in results.items():
        if any(validation.from_backend for validation in result.validations):
            stripped[path] = result.without_backend()
        else:
            stripped[path] = result
    return stripped


def _field_initialized(state: FormState, action: FieldInitialized) -> FormState:
    if state.interaction_flags[action.path].is_dirty and not action.force:
        return state
    return state.model_copy(update={"subject": field_path.with_value(state.subject, action.path, action.value)})


def _field_value_changed(state: FormState, action: FieldValueChanged) -> FormState:
    return state.model_copy(
        update={
            "subject": field_path.with_value(state.subject, action.path, action.value),
            "interaction_flags": _set_flags(state, action.path, is_dirty=True, force_show_result=False),
        },
    )


def _merge_validation(previous: ValidationResult | None, action: FieldValidated) -> ValidationResult:
    incoming = action.result
    if action.superseded:
        # Late answer for an older value: fresh sync entries stay, its async entries turn stale.
        stale = tuple(
            validation.model_copy(update={"is_stale": True}) for validation in incoming.async_entries()
        )
        if previous is None:
            return incoming.model_copy(update={"validations": stale})
        return previous.model_copy(update={"validations": previous.sync_entries() + stale})
    if incoming.is_partial:
        placeholders = () if previous is None else tuple(
            validation.model_copy(update={"is_stale": True}) for validation in previous.async_entries()
        )
        return incoming.model_copy(update={"validations": incoming.validations + placeholders})
    return incoming


def _field_validated(state: FormState, action: FieldValidated) -> FormState:
    results = dict(state.validation_results)
    if not action.result.validations:
        if action.path not in results:
            return state
        del results[action.path]
        return state.model_copy(update={"validation_results": results})

    previous = results.get(action.path)
    merged = _merge_validation(previous, action)
    results[action.path] = merged
    was_valid = previous is not None and previous.is_valid
    return state.model_copy(
        update={
            "validation_results": results,
            "interaction_flags": _set_flags(
                state,
                action.path,
                invalid_became_valid=not was_valid and merged.is_valid,
            ),
        },
    )


def _field_focused(state: FormState, action: FieldFocused) -> FormState:
    result = state.validation_results.get(action.path)
    return state.model_copy(
        update={
            "interaction_flags": _set_flags(
                state,
                action.path,
                focused=True,
                was_valid_on_focus=result is not None and result.is_valid,
            ),
        },
    )


def _field_lost_focus(state: FormState, action: FieldLostFocus) -> FormState:
    result = state.validation_results.get(action.path)
    return state.model_copy(
        update={
            "interaction_flags": _set_flags(
                state,
                action.path,
                focused=False,
                was_valid_on_lost_focus=result is not None and result.is_valid,
            ),
        },
    )


def _field_removed(state: FormState, action: FieldRemoved) -> FormState:
    results = {key: value for key, value in state.validation_results.items() if key != action.path}
    flags = {key: value for key, value in state.interaction_flags.items() if key != action.path}
    return state.model_copy(update={"validation_results": results, "interaction_flags": flags})


def _tried_to_submit(state: FormState, _action: FormAction) -> FormState:
    flags = {
        path: value if value.force_show_result else value.model_copy(update={"force_show_result": True})
        for path, value in state.interaction_flags.items()
    }
    return state.model_copy(update={"interaction_flags": flags})


def _submitting(state: FormState, _action: FormAction) -> FormState:
    return state.model_copy(update={"submit_in_progress": True})


def _submit_cancelled(state: FormState, _action: FormAction) -> FormState:
    return state.model_copy(update={"submit_in_progress": False})


def _submitted(state: FormState, _action: FormAction) -> FormState:
    return state.model_copy(
        update={
            "submit_in_progress": False,
            "general_validation_results": (),
            "interaction_flags": {},
            "validation_results": _strip_backend(state.validation_results),
        },
    )


def _tag_backend(validations: tuple[SingleValidationResult, ...]) -> tuple[SingleValidationResult, ...]:
    return tuple(
        validation if validation.from_backend else validation.model_copy(update={"from_backend": True})
        for validation in validations
    )


def _backend_validation_arrived(state: FormState, action: BackendValidationArrived) -> FormState:
    results = _strip_backend(state.validation_results)
    for path, validations in action.per_field.items():
        current = results.get(path)
        if current is None:
            current = ValidationResult(validated_value=field_path.read(state.subject, path))
        tagged = current.validations + _tag_backend(validations)
        results[path] = current.model_copy(update={"validations": tagged})
    return state.model_copy(
        update={
            "submit_in_progress": False,
            "general_validation_results": _tag_backend(action.general),
            "validation_results": results,
        },
    )


def _reset(state: FormState, action: Reset) -> FormState:
    return FormState.initial(action.original_subject, reset_epoch=state.reset_epoch + 1)


_TRANSITIONS: dict[FormActionKind, Callable[[FormState, Any], FormState]] = {
    FormActionKind.FIELD_INITIALIZED: _field_initialized,
    FormActionKind.FIELD_VALUE_CHANGED: _field_value_changed,
    FormActionKind.FIELD_VALIDATED: _field_validated,
    FormActionKind.FIELD_FOCUSED: _field_focused,
    FormActionKind.FIELD_LOST_FOCUS: _field_lost_focus,
    FormActionKind.FIELD_REMOVED: _field_removed,
    FormActionKind.TRIED_TO_SUBMIT: _tried_to_submit,
    FormActionKind.SUBMITTING: _submitting,
    FormActionKind.SUBMITTED: _submitted,
    FormActionKind.SUBMIT_CANCELLED: _submit_cancelled,
    FormActionKind.BACKEND_VALIDATION_ARRIVED: _backend_validation_arrived,
    FormActionKind.RESET: _reset,
}


def reduce(state: FormState, action: FormAction) -> FormState:
    """Apply one action and return the next state.

    Field-scoped actions for a path without interaction flags create them first, so every
    transition is total. ``state`` itself is never modified.

    Args:
        state: Current snapshot.
        action: Action to apply.

    Returns:
        FormState: Next snapshot (``state`` itself when nothing changed).
    """
    if action.field_scoped and action.path not in state.interaction_flags:
        flags = dict(state.interaction_flags)
        flags[action.path] = InteractionFlags()
        state = state.model_copy(update={"interaction_flags": flags})
    return _TRANSITIONS[action.kind](state, action)


class FormStore:
    """Holds one form instance's state and publishes its transitions."""

    def __init__(self, original_subject: dict[str, Any] | None = None) -> None:
        """Initialize the store.

        Args:
            original_subject: Initial data of the form; an empty subject when omitted.
        """
        self._state = FormState.initial(original_subject)
        self.started_empty = original_subject is None
        self._listeners: list[StateListener] = []
        self._field_listeners: dict[str, list[FieldListener]] = {}
        self._slices: dict[str, FieldSlice] = {}

    @property
    def state(self) -> FormState:
        """Return the current snapshot."""
        return self._state

    def dispatch(self, action: FormAction) -> FormState:
        """Apply an action and notify subscribers of what changed.

        Args:
            action: Action to apply.

        Returns:
            FormState: The new current snapshot.
        """
        previous = self._state
        self._state = reduce(previous, action)
        logger.debug("Form action applied", extra={"action": action.kind.value, "path": getattr(action, "path", None)})
        if self._state is previous:
            return self._state

        for listener in list(self._listeners):
            listener(self._state)
        for path, listeners in list(self._field_listeners.items()):
            before = self._slices.get(path)
            current = self.select_field(path)
            if before is not None and current is before:
                continue
            for listener in list(listeners):
                listener(current)
        return self._state

    def select_field(self, path: str) -> FieldSlice:
        """Return the slice of state read by the field at ``path``.

        The same slice object is returned for as long as none of its parts changed.
        """
        state = self._state
        current = FieldSlice(
            value=field_path.read(state.subject, path),
            validation_result=state.validation_results.get(path),
            interaction_flags=state.interaction_flags.get(path),
        )
        cached = self._slices.get(path)
        if cached is not None and cached.same_as(current):
            return cached
        self._slices[path] = current
        return current

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Listen to every transition.

        Returns:
            Callable[[], None]: Unsubscribe callback.
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def subscribe_field(self, path: str, listener: FieldListener) -> Callable[[], None]:
        """Listen to changes of one field's slice only.

        Returns:
            Callable[[], None]: Unsubscribe callback.
        """
        self._field_listeners.setdefault(path, []).append(listener)
        self.select_field(path)

        def _unsubscribe() -> None:
            listeners = self._field_listeners.get(path, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._field_listeners.pop(path, None)
                self._slices.pop(path, None)

        return _unsubscribe

    def has_field(self, path: str) -> bool:
        """Return whether the state tracks the field at ``path``."""
        return path in self._state.interaction_flags or path in self._state.validation_results
