"""Application layer - Circular dependency detection."""

import threading
from typing import List

from miraveja_wiring.domain import CircularDependencyError, DependencyKey


class CircularDependencyDetector:
    """Detects circular dependencies during resolution.

    One detector is shared by every stage of a hierarchy, so cycles that cross
    stage boundaries are caught as well. Stacks are thread-local.

    Attributes:
        _local: Thread-local storage for resolution stacks.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _get_stack(self) -> List[DependencyKey]:
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    def push(self, key: DependencyKey) -> None:
        """Add a key to the resolution stack.

        Args:
            key: The key being resolved.

        Raises:
            CircularDependencyError: If the key is already in the stack.
        """
        stack = self._get_stack()

        if key in stack:
            cycle_start_index = stack.index(key)
            cycle = stack[cycle_start_index:] + [key]
            raise CircularDependencyError(cycle)

        stack.append(key)

    def pop(self) -> None:
        """Remove the last key from the resolution stack."""
        stack = self._get_stack()
        if stack:
            stack.pop()

    def clear(self) -> None:
        if hasattr(self._local, "stack"):
            self._local.stack.clear()
