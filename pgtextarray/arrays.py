#      ___                  _   ____  ____
#     / _ \ _   _  ___  ___| |_|  _ \| __ )
#    | | | | | | |/ _ \/ __| __| | | |  _ \
#    | |_| | |_| |  __/\__ \ |_| |_| | |_) |
#     \__\_\\__,_|\___||___/\__|____/|____/
#
#   Copyright (c) 2014-2019 Appsicle
#   Copyright (c) 2019-2026 QuestDB
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.
#

"""
Rebuilding nested arrays from the flat element list a driver scans.

PostgreSQL arrays arrive from the scanning layer as a flat list of elements in
row-major order plus one (length, lower bound) pair per dimension. Since a
multidimensional PostgreSQL array has matching sub-dimensions at every level,
and at most 6 dimensions, the nested structure can always be rebuilt.
"""

import json
from collections import namedtuple
from functools import reduce
from operator import mul

MAX_DIMENSIONS = 6


class InvalidDimension(ValueError):
    def __init__(self, rank):
        super().__init__(f"invalid dimension: {rank}")
        self.rank = rank


class ShapeMismatch(ValueError):
    def __init__(self, count, shape):
        super().__init__(f"{count} element(s) do not fit array dimensions {list(shape)}")
        self.count = count
        self.shape = list(shape)


class ArrayFormatError(ValueError):
    pass


ArrayDimension = namedtuple('ArrayDimension', ['length', 'lower_bound'], defaults=[1])


class Element(namedtuple('Element', ['string', 'present'])):
    """A scanned array element; ``present`` is False for SQL NULL."""
    __slots__ = ()

    @classmethod
    def of(cls, value):
        if value is None:
            return ABSENT
        return cls(str(value), True)

    def value(self):
        return self.string if self.present else None


ABSENT = Element('', False)


def extract_dimensions(dimensions):
    """Shape of an array: the length of each dimension, in order."""
    return [int(d.length) for d in dimensions]


def product(shape):
    return reduce(mul, shape, 1)


def reconstruct(elements, shape):
    """
    Rebuild the nested lists for `shape` from the flat `elements`.

    Element ``i`` lands at the multi-index obtained by decomposing ``i``
    against `shape`, first dimension varying slowest. NULL elements become
    None. An empty shape stands for an empty (or NULL) array.
    """
    rank = len(shape)
    if rank > MAX_DIMENSIONS:
        raise InvalidDimension(rank)
    values = [e.value() for e in elements]
    if rank == 0:
        if values:
            raise ShapeMismatch(len(values), shape)
        return []
    if any(length < 0 for length in shape) or len(values) != product(shape):
        raise ShapeMismatch(len(values), shape)
    if rank == 1:
        return values
    return _unflatten(values, shape)


def _allocate(shape):
    if len(shape) == 1:
        return [None] * shape[0]
    return [_allocate(shape[1:]) for _ in range(shape[0])]


def _strides(shape):
    strides = [1] * len(shape)
    for k in range(len(shape) - 2, -1, -1):
        strides[k] = strides[k + 1] * shape[k + 1]
    return strides


def _unflatten(values, shape):
    nested = _allocate(shape)
    strides = _strides(shape)
    for i, value in enumerate(values):
        row = nested
        rest = i
        for stride in strides[:-1]:
            index, rest = divmod(rest, stride)
            row = row[index]
        row[rest] = value
    return nested


def flatten(nested, rank):
    """Leaves of a `rank`-deep nested list, depth-first, left to right."""
    if rank <= 1:
        return list(nested)
    return [leaf for sub in nested for leaf in flatten(sub, rank - 1)]


class TextArray:
    """
    A scanned ``text[]`` value: flat elements plus dimensions.

    This is what the driver adapters produce; `to_json` rebuilds the nested
    array instead of exposing the flat element list.
    """

    def __init__(self, elements=(), dimensions=(), element_oid=None):
        self.elements = list(elements)
        self.dimensions = [ArrayDimension(*d) for d in dimensions]
        self.element_oid = element_oid

    @classmethod
    def from_values(cls, values, shape=None, lower_bounds=None):
        """Build from flat text/None values; a flat list is one-dimensional by default."""
        values = list(values)
        if shape is None:
            shape = [len(values)] if values else []
        if lower_bounds is None:
            lower_bounds = [1] * len(shape)
        dimensions = [ArrayDimension(length, lower) for length, lower in zip(shape, lower_bounds)]
        return cls([Element.of(v) for v in values], dimensions)

    @property
    def shape(self):
        return extract_dimensions(self.dimensions)

    @property
    def ndim(self):
        return len(self.dimensions)

    def values(self):
        return [e.value() for e in self.elements]

    def to_nested(self):
        return reconstruct(self.elements, self.shape)

    def to_json(self, indent=None):
        separators = None if indent is not None else (',', ':')
        return json.dumps(self.to_nested(), ensure_ascii=False, indent=indent, separators=separators)

    def __eq__(self, other):
        if not isinstance(other, TextArray):
            return NotImplemented
        return self.elements == other.elements and self.dimensions == other.dimensions

    def __repr__(self):
        dims = ''.join(f'[{d.lower_bound}:{d.lower_bound + d.length - 1}]' for d in self.dimensions)
        return f'TextArray({dims}{self.values()})'
