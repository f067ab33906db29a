"""
State Canonicalization.

Core Idea (核心思想)
====================
The agent never indexes its value table by raw float vectors. Every distinct
sensation is registered once in a ``StateSpace`` and receives a small
integer handle; the value table is keyed by that handle. Two sensations that
compare equal element by element (no tolerance, no binning) always resolve to
the same handle, distinct sensations to distinct handles.

Handles are dense (0, 1, 2, ...) in order of first appearance and are never
reused or removed, so any handle held by the agent stays valid until the
state space is rebuilt by a policy load.

Complexity:
    - canonicalize / lookup: O(k) to build the key, O(1) average dict access
    - Memory: O(N × k) for N distinct sensations of dimension k
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from .exceptions import DimensionMismatchError, UsageError
from .types import FloatArray, Sensation, as_sensation


class StateSpace:
    """
    Append-only registry of distinct sensations.

    Attributes
    ----------
    dimension : Optional[int]
        Sensation length fixed by the first registered sensation, or None
        while the space is empty

    Examples
    --------
    >>> space = StateSpace()
    >>> space.canonicalize([0.0, 1.0])
    0
    >>> space.canonicalize([0.0, 1.0])
    0
    >>> space.canonicalize([1.0, 1.0])
    1
    """

    def __init__(self, dimension: Optional[int] = None) -> None:
        self._index: Dict[Tuple[float, ...], int] = {}
        self._features: List[FloatArray] = []
        self._dimension: Optional[int] = dimension

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    def canonicalize(self, sensation: Sensation) -> int:
        """
        Return the handle for ``sensation``, registering it if unseen.

        Raises
        ------
        UsageError
            If the sensation is not one-dimensional
        DimensionMismatchError
            If its length differs from the established dimensionality
        """
        features, key = self._prepare(sensation)
        handle = self._index.get(key)
        if handle is not None:
            return handle

        if self._dimension is None:
            self._dimension = len(key)
        handle = len(self._features)
        self._index[key] = handle
        self._features.append(features)
        return handle

    def lookup(self, sensation: Sensation) -> Optional[int]:
        """Return the handle for ``sensation`` without registering it."""
        _, key = self._prepare(sensation)
        return self._index.get(key)

    def features(self, handle: int) -> FloatArray:
        """Read-only feature vector registered under ``handle``."""
        return self._features[handle]

    def clear(self) -> None:
        """Forget every state. Only used when a policy is reloaded."""
        self._index.clear()
        self._features.clear()
        self._dimension = None

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[int]:
        return iter(range(len(self._features)))

    def __contains__(self, sensation: Sensation) -> bool:
        return self.lookup(sensation) is not None

    def _prepare(self, sensation: Sensation) -> Tuple[FloatArray, Tuple[float, ...]]:
        features = as_sensation(sensation)
        if features.ndim != 1:
            raise UsageError(
                f"sensation must be one-dimensional, got shape {features.shape}"
            )
        if self._dimension is not None and features.shape[0] != self._dimension:
            raise DimensionMismatchError(self._dimension, features.shape[0])
        return features, tuple(features.tolist())
