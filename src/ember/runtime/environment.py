"""
Variable scopes for the Ember interpreter.

Scopes are kept as a stack of dict frames. The bottom frame holds globals;
each executing block pushes a frame on top and pops it when the block ends.
Lookups and assignments walk from the top frame down.
"""

from contextlib import contextmanager
from typing import Dict, Iterator, List

from .values import Value


class UndefinedVariable(KeyError):
    """Raised by retrieve/assign when no frame binds the name."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class Environment:
    """
    A lexical scope chain.

    Usage:
        env = Environment()
        env.define("x", 1.0)
        with env.new_scope():
            env.define("x", 2.0)      # shadows the global
            env.assign("x", 3.0)      # updates the shadow
        env.retrieve("x")             # 1.0
    """

    def __init__(self):
        self._frames: List[Dict[str, Value]] = [{}]

    @property
    def depth(self) -> int:
        """Number of frames, 1 when only the global frame exists."""
        return len(self._frames)

    def define(self, name: str, value: Value) -> None:
        """Bind name in the innermost frame, replacing any binding there."""
        self._frames[-1][name] = value

    def retrieve(self, name: str) -> Value:
        """Return the value of the nearest binding of name."""
        for frame in reversed(self._frames):
            if name in frame:
                return frame[name]
        raise UndefinedVariable(name)

    def assign(self, name: str, value: Value) -> None:
        """
        Overwrite the nearest existing binding of name.

        Never creates a binding: an undeclared name raises UndefinedVariable.
        """
        for frame in reversed(self._frames):
            if name in frame:
                frame[name] = value
                return
        raise UndefinedVariable(name)

    def push(self) -> None:
        """Enter a new innermost frame."""
        self._frames.append({})

    def pop(self) -> None:
        """Discard the innermost frame."""
        if len(self._frames) == 1:
            raise RuntimeError("cannot pop the global scope")
        self._frames.pop()

    @contextmanager
    def new_scope(self) -> Iterator[Dict[str, Value]]:
        """
        Context manager for a block scope.

        The frame is popped on every exit path, including exceptions.
        """
        self.push()
        try:
            yield self._frames[-1]
        finally:
            self.pop()

    def __contains__(self, name: str) -> bool:
        return any(name in frame for frame in self._frames)

    def snapshot(self) -> Dict[str, Value]:
        """Visible bindings, inner frames shadowing outer ones."""
        merged: Dict[str, Value] = {}
        for frame in self._frames:
            merged.update(frame)
        return merged
