"""Handle-based lookup of parameters.

A registry hands out the integer handle of each registered parameter and
resolves handles back to parameters. Entries are weak: registering a
parameter never keeps it alive, and collected parameters silently drop
out of the registry.
"""

import logging
import weakref
from typing import Iterator, List, Union

from .parameter import Parameter

logger = logging.getLogger(__name__)


class ParameterRegistry:
    """Maps stable integer handles to live parameters."""

    def __init__(self):
        self._entries: "weakref.WeakValueDictionary[int, Parameter]" = weakref.WeakValueDictionary()

    def register(self, parameter: Parameter) -> int:
        """Register a parameter and return its handle.

        Registering the same parameter again returns the same handle.

        Raises:
            TypeError: If parameter is not a Parameter
        """
        if not isinstance(parameter, Parameter):
            raise TypeError(f"Can only register Parameter instances, got {type(parameter).__name__}")
        handle = parameter.handle
        if handle not in self._entries:
            self._entries[handle] = parameter
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"Registered {parameter} as handle {handle}")
        return handle

    def get(self, handle: int, default=None):
        """Return the parameter for handle, or default if unknown or collected."""
        return self._entries.get(handle, default)

    def __getitem__(self, handle: int) -> Parameter:
        try:
            return self._entries[handle]
        except KeyError:
            raise KeyError(f"No live parameter with handle {handle}") from None

    def discard(self, item: Union[int, Parameter]) -> None:
        """Remove a parameter (or handle); unknown entries are ignored."""
        handle = item.handle if isinstance(item, Parameter) else item
        self._entries.pop(handle, None)

    def handles(self) -> List[int]:
        """Handles of live registered parameters, in ascending order."""
        return sorted(self._entries.keys())

    def __contains__(self, item: Union[int, Parameter]) -> bool:
        if isinstance(item, Parameter):
            return self._entries.get(item.handle) is item
        return item in self._entries

    def __iter__(self) -> Iterator[Parameter]:
        for handle in self.handles():
            parameter = self._entries.get(handle)
            if parameter is not None:
                yield parameter

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ParameterRegistry({len(self)} parameters)"
