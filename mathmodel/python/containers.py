# Copyright 2010-2025 Google LLC
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Multi-dimensional containers of variables, constraints or values.

An IndexedContainer maps index tuples, taken from the cartesian product of its
index sets, to elements:

  x = containers.IndexedContainer("x", (range(1, 4), ["a", "b"]))
  x[1, "a"] = 3.0

Elements are stored in a numpy object array whose shape is the number of
elements of each index set. An index tuple is translated into array positions
by one of two indexers, chosen when the container is built:

  * dense, when every index set is a range: positions are computed from the
    start and step of each range.
  * sparse, when at least one index set is an arbitrary sequence of hashable
    keys: the positions of the keys of those index sets are kept in dicts.
"""

import collections.abc
import itertools
import numbers
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    Optional,
    Sequence,
    Tuple,
    Union,
)

import numpy as np

from mathmodel.python import errors

IndexSet = Union[range, Tuple[Any, ...]]


def _range_position(index_set: range, key: Any, dimension: int, name: str) -> int:
    """Returns the position of key in index_set, a range."""
    if not isinstance(key, numbers.Integral):
        raise errors.KeyNotFoundError(
            f"{name} has no index {key!r} in dimension {dimension}, expected an"
            f" integer of {index_set}"
        )
    offset, remainder = divmod(key - index_set.start, index_set.step)
    if remainder or not 0 <= offset < len(index_set):
        raise IndexError(
            f"index {key} is out of {index_set} in dimension {dimension} of {name}"
        )
    return offset


class _DenseIndexer:
    """Maps index tuples to positions when every index set is a range."""

    __slots__ = ("_ranges",)

    def __init__(self, ranges: Sequence[range]) -> None:
        self._ranges: Tuple[range, ...] = tuple(ranges)

    @property
    def is_dense(self) -> bool:
        return True

    def has_key(self, dimension: int, key: Any) -> bool:
        del dimension, key  # Unused.
        return False

    def position(self, index: Tuple[Any, ...], name: str) -> Tuple[int, ...]:
        return tuple(
            _range_position(index_set, key, dimension, name)
            for dimension, (index_set, key) in enumerate(zip(self._ranges, index))
        )


class _SparseIndexer:
    """Maps index tuples to positions when some index sets are not ranges."""

    __slots__ = ("_dimensions",)

    def __init__(self, index_sets: Sequence[IndexSet]) -> None:
        self._dimensions: Tuple[Union[range, Dict[Any, int]], ...] = tuple(
            index_set if isinstance(index_set, range) else _key_positions(index_set)
            for index_set in index_sets
        )

    @property
    def is_dense(self) -> bool:
        return False

    def has_key(self, dimension: int, key: Any) -> bool:
        positions = self._dimensions[dimension]
        if isinstance(positions, range):
            return False
        try:
            return key in positions
        except TypeError:  # Unhashable.
            return False

    def position(self, index: Tuple[Any, ...], name: str) -> Tuple[int, ...]:
        result = []
        for dimension, (positions, key) in enumerate(zip(self._dimensions, index)):
            if isinstance(positions, range):
                result.append(_range_position(positions, key, dimension, name))
                continue
            try:
                position = positions.get(key)
            except TypeError:  # Unhashable.
                position = None
            if position is None:
                raise errors.KeyNotFoundError(
                    f"{name} has no index {key!r} in dimension {dimension}"
                )
            result.append(position)
        return tuple(result)


def _key_positions(keys: Sequence[Any]) -> Dict[Any, int]:
    positions = {}
    for position, key in enumerate(keys):
        if key in positions:
            raise ValueError(f"duplicate key {key!r} in index set")
        positions[key] = position
    return positions


class IndexedContainer(collections.abc.Mapping):
    """A named container indexed by the cartesian product of its index sets.

    Each index set is either a range (any start and step) or any iterable of
    hashable keys, whose iteration order is kept. The container is dense when
    all index sets are ranges and sparse otherwise, both forms have the same
    interface:

      * c[i, j] returns the element at index (i, j), or None if it was never
        assigned. One dimensional containers also accept c[i].
      * c[i, j] = value assigns an element.
      * iterating yields the index tuples in the order of the cartesian product
        of the index sets, items() and values() follow the same order.
      * len(c) == c.size is the number of elements.

    Lookups raise:
      * DimensionMismatchError if the number of indices is not c.ndim.
      * KeyNotFoundError if a key is not in the index set of its dimension.
      * IndexError if an integer is outside the range of its dimension.

    Attributes:
      name: The name of the container, used in error messages and by the model
        to name elements, e.g. "x[1,a]".
      index_sets: The index sets, ranges are kept, other iterables are stored as
        tuples.
    """

    __slots__ = "_name", "_index_sets", "_indexer", "_data"

    def __init__(
        self,
        name: str,
        index_sets: Sequence[Iterable[Any]],
        initializer: Optional[Callable[..., Any]] = None,
    ) -> None:
        """Creates a container whose elements are all None.

        Args:
          name: The name of the container.
          index_sets: The index sets, at least one.
          initializer: If set, element (i, j, ...) is initialized to
            initializer(i, j, ...), in iteration order.

        Raises:
          ValueError: if there is no index set or an index set has duplicate keys.
        """
        if not index_sets:
            raise ValueError(f"{name} needs at least one index set")
        self._name: str = name
        self._index_sets: Tuple[IndexSet, ...] = tuple(
            index_set if isinstance(index_set, range) else tuple(index_set)
            for index_set in index_sets
        )
        if all(isinstance(index_set, range) for index_set in self._index_sets):
            self._indexer = _DenseIndexer(self._index_sets)
        else:
            self._indexer = _SparseIndexer(self._index_sets)
        self._data: np.ndarray = np.empty(
            tuple(len(index_set) for index_set in self._index_sets), dtype=object
        )
        if initializer is not None:
            flat = self._data.reshape(-1)
            for position, index in enumerate(self):
                flat[position] = initializer(*index)

    @classmethod
    def _from_data(
        cls,
        name: str,
        index_sets: Tuple[IndexSet, ...],
        indexer: Union[_DenseIndexer, _SparseIndexer],
        data: np.ndarray,
    ) -> "IndexedContainer":
        result = cls.__new__(cls)
        result._name = name
        result._index_sets = index_sets
        result._indexer = indexer
        result._data = data
        return result

    @property
    def name(self) -> str:
        return self._name

    @property
    def index_sets(self) -> Tuple[IndexSet, ...]:
        return self._index_sets

    @property
    def is_dense(self) -> bool:
        return self._indexer.is_dense

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._data.shape

    @property
    def ndim(self) -> int:
        return self._data.ndim

    @property
    def size(self) -> int:
        return self._data.size

    def _index_tuple(self, key: Any) -> Tuple[Any, ...]:
        if not isinstance(key, tuple):
            key = (key,)
        elif self.ndim == 1 and len(key) != 1 and self._indexer.has_key(0, key):
            # A one dimensional container whose keys are tuples.
            key = (key,)
        if len(key) != self.ndim:
            raise errors.DimensionMismatchError(
                f"Wrong number of indices for {self._name}, expected {self.ndim}"
            )
        return key

    def position(self, key: Any) -> Tuple[int, ...]:
        """Returns the position of the element at key in the backing array."""
        return self._indexer.position(self._index_tuple(key), self._name)

    def __getitem__(self, key: Any) -> Any:
        return self._data[self.position(key)]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._data[self.position(key)] = value

    def __contains__(self, key: Any) -> bool:
        try:
            self.position(key)
        except (KeyError, IndexError, errors.DimensionMismatchError):
            return False
        return True

    def __iter__(self) -> Iterator[Tuple[Any, ...]]:
        return itertools.product(*self._index_sets)

    def __len__(self) -> int:
        return self.size

    def values(self) -> Iterator[Any]:  # pytype: disable=signature-mismatch
        return iter(self._data.reshape(-1))

    def items(self) -> Iterator[Tuple[Tuple[Any, ...], Any]]:  # pytype: disable=signature-mismatch
        return zip(iter(self), self._data.reshape(-1))

    def map(self, function: Callable[[Any], Any]) -> "IndexedContainer":
        """Returns a container of the same shape with function applied to each element.

        The result has the same form (dense or sparse) and shares the index sets
        and key positions of this container.

        Args:
          function: Called once per element, in iteration order.

        Returns:
          The new container, with the same name.
        """
        mapped = np.empty(self._data.shape, dtype=object)
        flat = mapped.reshape(-1)
        for position, value in enumerate(self._data.reshape(-1)):
            flat[position] = function(value)
        return IndexedContainer._from_data(
            self._name, self._index_sets, self._indexer, mapped
        )

    def to_numpy(self) -> np.ndarray:
        """Returns a copy of the elements as a numpy object array."""
        return self._data.copy()

    def __repr__(self):
        form = "dense" if self.is_dense else "sparse"
        return f"<IndexedContainer {self._name!r}, {form}, shape: {self.shape}>"
