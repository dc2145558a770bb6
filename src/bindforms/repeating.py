"""A field holding an ordered collection of sub-subjects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bindforms import field_path

if TYPE_CHECKING:
    from bindforms.form import FieldBinding


class RepeatingFieldGroup:
    """Adds and removes items of the list stored at the group's own path.

    Child fields bind beneath ``group[index]`` and are validated independently. Item
    bindings are positional: after a removal the surviving children keep their index
    and see the shifted values, and the binding of the former last index is unmounted.
    """

    def __init__(self, binding: FieldBinding) -> None:
        """Initialize the group.

        Args:
            binding: Mounted binding of the collection field.
        """
        self.binding = binding
        self._children: dict[int, list[FieldBinding]] = {}
        binding.form.track_group(self)

    @property
    def path(self) -> str:
        """Return the path of the collection."""
        return self.binding.path

    @property
    def items(self) -> list[Any]:
        """Return a copy of the current items."""
        value = self.binding.value
        return list(value) if isinstance(value, list | tuple) else []

    def child_path(self, index: int, bind_to: str | None = None) -> str:
        """Return the path of a child field of item ``index``."""
        return field_path.resolve(bind_to, self.path, index)

    def add_item(self, item: Any = None) -> int:
        """Append an item.

        Returns:
            int: Index of the new item.
        """
        items = self.items
        items.append(item)
        self.binding.on_change(items)
        return len(items) - 1

    def remove_item(self, index: int) -> None:
        """Remove the item at ``index``; out-of-range indexes change nothing."""
        items = self.items
        if not 0 <= index < len(items):
            return
        remaining = [item for position, item in enumerate(items) if position != index]
        self.binding.on_change(remaining)
        self.prune()

    def bind_item(self, index: int, bind_to: str | None = None, **options: Any) -> FieldBinding:
        """Bind a child field of item ``index``.

        Args:
            index: Item index.
            bind_to: Binding inside the item; empty binds the whole item.
            **options: Further ``Form.bind`` options.

        Returns:
            FieldBinding: The mounted child binding.
        """
        child = self.binding.form.bind(bind_to, parent_path=self.path, index=index, **options)
        self._children.setdefault(index, []).append(child)
        return child

    def prune(self) -> None:
        """Unmount child bindings of items that no longer exist."""
        count = len(self.items)
        for index in sorted(position for position in self._children if position >= count):
            for child in self._children.pop(index):
                child.unmount()

    def children(self, index: int) -> list[FieldBinding]:
        """Return the child bindings of item ``index``."""
        return list(self._children.get(index, []))
