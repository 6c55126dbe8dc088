"""In-process stand-in for the host build system's action registry."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from lint_overlay.domain.models import Action


class OutputConflictError(ValueError):
    """Raised when two actions declare the same output path."""

    def __init__(self, path: str, first: Action, second: Action) -> None:
        self.path = path
        self.first = first
        self.second = second
        super().__init__(
            f"output {path!r} declared by both {first.progress_message!r} "
            f"and {second.progress_message!r}"
        )


@runtime_checkable
class ActionSink(Protocol):
    """Capability the visitor uses to hand described actions to the host."""

    def submit(self, action: Action) -> None: ...


class ActionGraph(ActionSink):
    """Records submitted actions in order and indexes them by output path."""

    __slots__ = ("_actions", "_by_output")

    def __init__(self) -> None:
        self._actions: list[Action] = []
        self._by_output: dict[str, Action] = {}

    def submit(self, action: Action) -> None:
        if not action.outputs:
            raise ValueError(f"action {action.progress_message!r} declares no outputs")
        for path in action.outputs:
            existing = self._by_output.get(path)
            if existing is not None:
                raise OutputConflictError(path, existing, action)
        if len(set(action.outputs)) != len(action.outputs):
            raise ValueError(f"action {action.progress_message!r} repeats an output path")

        for path in action.outputs:
            self._by_output[path] = action
        self._actions.append(action)

    @property
    def actions(self) -> tuple[Action, ...]:
        return tuple(self._actions)

    def producer_of(self, path: str) -> Action | None:
        return self._by_output.get(path)

    def outputs(self) -> tuple[str, ...]:
        return tuple(sorted(self._by_output))

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(tuple(self._actions))


__all__ = ["ActionGraph", "ActionSink", "OutputConflictError"]
