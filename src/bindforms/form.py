"""Form instance facade and the field binding contract.

A ``Form`` owns one store, one validation scheduler and one submission controller.
``FieldBinding`` is what an input widget talks to: it reads ``props`` (value, enabled,
validation status) and reports changes, focus and blur. A binding revalidates whenever
its own value changes in the store, whoever changed it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple

from bindforms import field_path, logger
from bindforms.repeating import RepeatingFieldGroup
from bindforms.settings import DEFAULT_SUBMIT_ERROR_MESSAGE
from bindforms.store import FieldSlice, FormStore
from bindforms.submission import SubmissionController
from bindforms.typing.enums import ValidationMode, ValidationSeverity
from bindforms.typing.models import (
    FieldFocused,
    FieldInitialized,
    FieldLostFocus,
    FieldRemoved,
    FieldValueChanged,
    FormItemValidations,
)
from bindforms.validation.display import is_validation_in_progress, should_show
from bindforms.validation.scheduler import AsyncValidationScheduler

if TYPE_CHECKING:
    from collections.abc import Callable

    from bindforms.typing.enums import SubmitOutcome
    from bindforms.typing.models import FormState, SingleValidationResult, SubmitOptions
    from bindforms.typing.protocol import (
        ConfirmationPrompt,
        CustomValidator,
        FocusManager,
        ModalContext,
        SubmitOperation,
    )

_UNSET: Any = object()


class FieldProps(NamedTuple):
    """What a bound input widget renders."""

    value: Any
    enabled: bool
    validation_status: ValidationSeverity
    helper_text_shown: bool
    messages: tuple[str, ...]


class FieldBinding:
    """Connects one input to its path in the form subject."""

    def __init__(  # noqa: PLR0913
        self,
        form: Form,
        path: str,
        *,
        rules: FormItemValidations | None = None,
        check: CustomValidator | None = None,
        validation_mode: ValidationMode | None = None,
        debounce_ms: int | None = None,
        enabled: bool = True,
        initial_value: Any = None,
    ) -> None:
        """Initialize the binding; ``mount`` registers it with the form.

        Args:
            form: Owning form.
            path: Resolved field path.
            rules: Built-in rule set of the field.
            check: Custom asynchronous check.
            validation_mode: Display mode, the form default when omitted.
            debounce_ms: Throttle window of the custom check, the form default when omitted.
            enabled: Field-level enabled flag.
            initial_value: Used when the original subject has no value at ``path``.
        """
        self.form = form
        self.path = path
        self.rules = rules or FormItemValidations()
        self.check = check
        self.validation_mode = validation_mode or form.validation_mode
        self.debounce_ms = form.debounce_ms if debounce_ms is None else debounce_ms
        self.enabled = enabled
        self.initial_value = initial_value
        self._requested_value: Any = _UNSET
        self._stable_shown: bool | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._listeners: list[Callable[[FieldProps], None]] = []

    @property
    def mounted(self) -> bool:
        """Return whether the binding is registered with its form."""
        return self._unsubscribe is not None

    @property
    def value(self) -> Any:
        """Return the live value at the field path."""
        return field_path.read(self.form.store.state.subject, self.path)

    def mount(self) -> FieldBinding:
        """Register the field: write its initial value and run a first validation."""
        if self._unsubscribe is None:
            self._unsubscribe = self.form.store.subscribe_field(self.path, self._on_slice)
        self._requested_value = _UNSET
        self._stable_shown = None

        initial = field_path.read(self.form.store.state.original_subject, self.path, _UNSET)
        if initial is _UNSET:
            initial = self.initial_value
        if initial is not None:
            self.form.store.dispatch(FieldInitialized(path=self.path, value=initial))
        self._revalidate_if_changed(self.value)
        return self

    def unmount(self) -> None:
        """Unregister the field; late validation results for it are discarded."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.form.scheduler.cancel(self.path)
        self.form.store.dispatch(FieldRemoved(path=self.path))
        self.form.forget(self)

    def on_change(self, value: Any) -> None:
        """Report a user-entered value."""
        self.form.store.dispatch(FieldValueChanged(path=self.path, value=value))

    def on_focus(self) -> None:
        """Report that the input received focus."""
        self.form.store.dispatch(FieldFocused(path=self.path))

    def on_blur(self) -> None:
        """Report that the input lost focus."""
        self.form.store.dispatch(FieldLostFocus(path=self.path))

    def validate(self, value: Any = _UNSET) -> None:
        """Validate ``value`` (the live value by default) now."""
        if value is _UNSET:
            value = self.value
        self._requested_value = value
        self.form.scheduler.request(
            self.path,
            self.rules,
            self.check,
            value,
            wait_seconds=self.debounce_ms / 1000,
        )

    def _revalidate_if_changed(self, value: Any) -> None:
        if self._requested_value is not _UNSET and self._requested_value == value:
            return
        self.validate(value)

    def _on_slice(self, current: FieldSlice) -> None:
        self._revalidate_if_changed(current.value)
        if self._listeners:
            props = self.props()
            for listener in list(self._listeners):
                listener(props)

    def subscribe(self, listener: Callable[[FieldProps], None]) -> Callable[[], None]:
        """Listen to this field's rendered props; returns the unsubscribe callback."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def props(self) -> FieldProps:
        """Compute the props an input renders with."""
        current = self.form.store.select_field(self.path)
        result = current.validation_result
        in_progress = is_validation_in_progress(result, current.value)
        decision = should_show(
            current.interaction_flags,
            result,
            validation_mode=self.validation_mode,
            validation_in_progress=in_progress,
            previous_decision=self._stable_shown,
        )
        if not in_progress or self._stable_shown is None:
            self._stable_shown = decision.should_show

        messages: tuple[str, ...] = ()
        if decision.should_show and result is not None:
            messages = tuple(
                validation.invalid_message
                for validation in result.validations
                if not validation.is_valid and validation.invalid_message
            )
        return FieldProps(
            value=current.value,
            enabled=self.enabled and self.form.is_enabled,
            validation_status=decision.severity,
            helper_text_shown=decision.should_show,
            messages=messages,
        )


class Form:
    """One form instance."""

    def __init__(  # noqa: PLR0913
        self,
        data: dict[str, Any] | None = None,
        *,
        submit_operation: SubmitOperation | None = None,
        enabled: bool = True,
        validation_mode: ValidationMode = ValidationMode.ERROR_LATE,
        debounce_ms: int = 0,
        modal: ModalContext | None = None,
        focus_manager: FocusManager | None = None,
        keep_modal_open_on_submit: bool = False,
        default_error_message: str = DEFAULT_SUBMIT_ERROR_MESSAGE,
        submit_options: SubmitOptions | None = None,
        on_confirmation_requested: ConfirmationPrompt | None = None,
        on_cancel: Callable[[], Any] | None = None,
        on_reset: Callable[[], Any] | None = None,
    ) -> None:
        """Initialize the form.

        Args:
            data: Initial subject; the form starts empty when omitted.
            submit_operation: External operation persisting the cleaned subject.
            enabled: Form-level enabled flag.
            validation_mode: Default display mode of bound fields.
            debounce_ms: Default throttle window of custom checks.
            modal: Owning modal dialog, if any.
            focus_manager: Source of the element to refocus after submitting.
            keep_modal_open_on_submit: Leave the modal open after a successful submit.
            default_error_message: General error text for failures without a message.
            submit_options: Options handed to the submit operation.
            on_confirmation_requested: Shows the warnings confirmation prompt.
            on_cancel: Cancel notification.
            on_reset: Reset notification.
        """
        self.store = FormStore(data)
        self.scheduler = AsyncValidationScheduler(self.store.dispatch)
        self.validation_mode = validation_mode
        self.debounce_ms = debounce_ms
        self._bindings: list[FieldBinding] = []
        self._groups: list[RepeatingFieldGroup] = []
        self._on_reset = on_reset
        self.controller = SubmissionController(
            self.store,
            submit_operation,
            scheduler=self.scheduler,
            modal=modal,
            focus_manager=focus_manager,
            keep_modal_open_on_submit=keep_modal_open_on_submit,
            default_error_message=default_error_message,
            submit_options=submit_options,
            on_confirmation_requested=on_confirmation_requested,
            on_cancel=on_cancel,
            on_reset=self._remount,
        )
        self.controller.enabled = enabled

    @property
    def state(self) -> FormState:
        """Return the current state snapshot."""
        return self.store.state

    @property
    def enabled(self) -> bool:
        """Return the form-level enabled flag."""
        return self.controller.enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self.controller.enabled = value

    @property
    def is_enabled(self) -> bool:
        """Return whether input and submission are accepted right now."""
        return self.controller.is_enabled

    @property
    def data(self) -> dict[str, Any]:
        """Return the subject without unbound fields, as it would be submitted."""
        return field_path.without_unbound(self.store.state.subject)

    @property
    def bindings(self) -> list[FieldBinding]:
        """Return the mounted field bindings."""
        return list(self._bindings)

    @property
    def general_validation_results(self) -> tuple[SingleValidationResult, ...]:
        """Return form-scoped results, for a summary panel."""
        return self.store.state.general_validation_results

    def bind(  # noqa: PLR0913
        self,
        bind_to: str | None = None,
        *,
        parent_path: str | None = None,
        index: int | None = None,
        rules: FormItemValidations | None = None,
        check: CustomValidator | None = None,
        validation_mode: ValidationMode | None = None,
        debounce_ms: int | None = None,
        enabled: bool = True,
        initial_value: Any = None,
    ) -> FieldBinding:
        """Bind and mount a field.

        Args:
            bind_to: Binding name; empty binds an unbound field, or the whole element
                under a repeating parent.
            parent_path: Path of the enclosing repeating group.
            index: Item index inside the enclosing group.
            rules: Built-in rule set.
            check: Custom asynchronous check.
            validation_mode: Display mode override.
            debounce_ms: Throttle window override, in milliseconds.
            enabled: Field-level enabled flag.
            initial_value: Fallback initial value.

        Returns:
            FieldBinding: The mounted binding.
        """
        binding = FieldBinding(
            self,
            field_path.resolve(bind_to, parent_path, index),
            rules=rules,
            check=check,
            validation_mode=validation_mode,
            debounce_ms=debounce_ms,
            enabled=enabled,
            initial_value=initial_value,
        )
        self._bindings.append(binding)
        logger.debug("Field bound", extra={"path": binding.path})
        return binding.mount()

    def repeating_group(self, bind_to: str, **options: Any) -> RepeatingFieldGroup:
        """Bind a field holding an ordered collection of sub-subjects."""
        return RepeatingFieldGroup(self.bind(bind_to, **options))

    def track_group(self, group: RepeatingFieldGroup) -> None:
        """Register a repeating group so a reset can drop children of vanished items."""
        self._groups.append(group)

    def forget(self, binding: FieldBinding) -> None:
        """Drop an unmounted binding."""
        if binding in self._bindings:
            self._bindings.remove(binding)

    def update(self, change: Any) -> None:
        """Apply a mapping of ``path -> value`` as user changes; anything else is ignored."""
        if not isinstance(change, dict):
            return
        for path, value in change.items():
            self.store.dispatch(FieldValueChanged(path=path, value=value))

    async def submit(self) -> SubmitOutcome:
        """Attempt a submission."""
        return await self.controller.submit()

    async def confirm(self) -> SubmitOutcome:
        """Accept pending warnings and submit."""
        return await self.controller.confirm()

    def dismiss_confirmation(self) -> None:
        """Close the warnings prompt without submitting."""
        self.controller.dismiss_confirmation()

    def cancel(self) -> None:
        """Cancel editing."""
        self.controller.cancel()

    def reset(self) -> None:
        """Start over from the original subject."""
        self.controller.reset()

    async def settle(self) -> None:
        """Wait for every scheduled validation to land."""
        await self.scheduler.drain()

    def _remount(self) -> None:
        for group in list(self._groups):
            group.prune()
        for binding in list(self._bindings):
            binding.mount()
        if self._on_reset is not None:
            self._on_reset()
