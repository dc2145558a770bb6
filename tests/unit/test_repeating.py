from __future__ import annotations

import asyncio

from bindforms.form import Form
from bindforms.typing.enums import SubmitOutcome
from bindforms.typing.models import FormItemValidations


def test_add_items_then_submit_sends_collection(mocker) -> None:
    operation = mocker.AsyncMock()
    form = Form(submit_operation=operation)
    group = form.repeating_group("arrayItems")

    assert group.add_item({"name": "John"}) == 0
    assert group.add_item({"name": "Peter"}) == 1
    asyncio.run(form.submit())

    payload = operation.await_args.args[0]
    assert payload == {"arrayItems": [{"name": "John"}, {"name": "Peter"}]}


def test_child_paths_carry_item_index() -> None:
    group = Form().repeating_group("arrayItems")

    assert group.child_path(2, "name") == "arrayItems[2].name"
    assert group.child_path(0) == "arrayItems[0]"


def test_items_are_validated_independently() -> None:
    form = Form({"arrayItems": [{"name": "Al"}, {"name": "Peter"}]})
    group = form.repeating_group("arrayItems")
    rules = FormItemValidations(min_length=3)

    first = group.bind_item(0, "name", rules=rules)
    second = group.bind_item(1, "name", rules=rules)

    assert first.path == "arrayItems[0].name"
    assert form.state.validation_results["arrayItems[0].name"].is_valid is False
    assert form.state.validation_results["arrayItems[1].name"].is_valid is True
    assert second.value == "Peter"


def test_remove_item_shifts_values_and_unmounts_last_index() -> None:
    form = Form({"arrayItems": [{"name": "Al"}, {"name": "Peter"}]})
    group = form.repeating_group("arrayItems")
    rules = FormItemValidations(min_length=3)
    first = group.bind_item(0, "name", rules=rules)
    group.bind_item(1, "name", rules=rules)

    group.remove_item(0)

    assert group.items == [{"name": "Peter"}]
    assert first.value == "Peter"
    assert form.state.validation_results["arrayItems[0].name"].is_valid is True
    assert "arrayItems[1].name" not in form.state.validation_results
    assert group.children(1) == []


def test_remove_item_out_of_range_changes_nothing() -> None:
    form = Form({"arrayItems": [1]})
    group = form.repeating_group("arrayItems")
    before = form.state

    group.remove_item(5)

    assert form.state is before


def test_reset_after_submit_drops_children_of_vanished_items(mocker) -> None:
    operation = mocker.AsyncMock()
    form = Form(submit_operation=operation)
    group = form.repeating_group("arrayItems")
    required = FormItemValidations(required=True)
    for name in ("John", "Peter"):
        index = group.add_item({"name": name})
        group.bind_item(index, "name", rules=required)

    assert asyncio.run(form.submit()) is SubmitOutcome.SUBMITTED

    assert group.items == []
    assert group.children(0) == []
    assert group.children(1) == []
    assert not any(path.startswith("arrayItems[") for path in form.state.validation_results)

    index = group.add_item({"name": "Ann"})
    group.bind_item(index, "name", rules=required)

    assert asyncio.run(form.submit()) is SubmitOutcome.SUBMITTED
    assert operation.await_args.args[0] == {"arrayItems": [{"name": "Ann"}]}


def test_reset_keeps_children_of_items_in_original_data() -> None:
    form = Form({"arrayItems": [{"name": "Al"}]})
    group = form.repeating_group("arrayItems")
    group.bind_item(0, "name")
    index = group.add_item({"name": "Peter"})
    group.bind_item(index, "name")

    form.reset()

    assert [child.path for child in group.children(0)] == ["arrayItems[0].name"]
    assert group.children(1) == []
    assert [binding.path for binding in form.bindings] == ["arrayItems", "arrayItems[0].name"]
