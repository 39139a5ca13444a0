# Copyright 2018 The LibRec Authors. All Rights Reserved.
#
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
# ============================================================================

import copy

import numpy as np

from ..exception import StructureError
from ..utils import get_rng
from .sparse_matrix import SparseMatrix
from .sparse_matrix import SparseVector


class TensorEntry:
    """An entry of a :obj:`SparseTensor` visited by iteration."""

    __slots__ = ("tensor", "position")

    def __init__(self, tensor, position):
        self.tensor = tensor
        self.position = position

    @property
    def keys(self):
        return self.tensor.keys(self.position)

    def key(self, d):
        return self.tensor.key(d, self.position)

    @property
    def value(self):
        return self.tensor.value(self.position)

    def set(self, value):
        self.tensor._values[self.position] = float(value)

    def __repr__(self):
        return "TensorEntry(keys={}, value={})".format(self.keys, self.value)


class SparseTensor:
    """Sparse N-dimensional tensor (N >= 3) with a distinguished user and
    item dimension.

    Entries are kept as one key list per dimension plus a value list.
    Each dimension may carry an index ``key -> positions``; indices are
    built on demand and kept in sync with insertions and removals.

    Parameters
    ----------
    dims: sequence of int, required
        Size of every dimension.

    user_dim: int, optional, default: 0
        Dimension holding user indices.

    item_dim: int, optional, default: 1
        Dimension holding item indices.
    """

    def __init__(self, dims, user_dim=0, item_dim=1):
        self.dims = tuple(int(d) for d in dims)
        self.num_dims = len(self.dims)
        if self.num_dims < 3:
            raise ValueError(
                "A tensor needs at least 3 dimensions but {}".format(self.num_dims)
            )
        if any(d <= 0 for d in self.dims):
            raise ValueError("Dimension sizes must be positive: {}".format(self.dims))
        if user_dim == item_dim or not (
            0 <= user_dim < self.num_dims and 0 <= item_dim < self.num_dims
        ):
            raise ValueError(
                "Invalid user/item dimensions ({}, {})".format(user_dim, item_dim)
            )

        self.user_dim = user_dim
        self.item_dim = item_dim

        self._keys = [[] for _ in range(self.num_dims)]
        self._values = []
        self._indices = [None] * self.num_dims

    def _validate_keys(self, keys):
        if len(keys) != self.num_dims:
            raise StructureError(
                "Expected {} keys but {}".format(self.num_dims, len(keys))
            )
        for d, k in enumerate(keys):
            if not 0 <= k < self.dims[d]:
                raise StructureError(
                    "Key {} out of range [0, {}) in dimension {}".format(k, self.dims[d], d)
                )

    def size(self):
        return len(self._values)

    def __len__(self):
        return len(self._values)

    def keys(self, pos):
        return tuple(self._keys[d][pos] for d in range(self.num_dims))

    def key(self, d, pos):
        return self._keys[d][pos]

    def value(self, pos):
        return self._values[pos]

    def __iter__(self):
        for pos in range(len(self._values)):
            yield TensorEntry(self, pos)

    def is_indexed(self, d):
        return self._indices[d] is not None

    def build_index(self, d):
        """Build (or rebuild) the key index of dimension d"""
        index = {}
        for pos, key in enumerate(self._keys[d]):
            index.setdefault(key, set()).add(pos)
        self._indices[d] = index

    def build_indices(self):
        for d in range(self.num_dims):
            self.build_index(d)

    def get_index(self, d, key):
        """Positions of the entries having `key` in dimension d"""
        if self._indices[d] is None:
            self.build_index(d)
        return sorted(self._indices[d].get(key, ()))

    def get_index_keys(self, sd, key, td):
        """Keys in dimension td of the entries having `key` in dimension sd"""
        return [self._keys[td][pos] for pos in self.get_index(sd, key)]

    def _match(self, pos, fixed):
        return all(self._keys[d][pos] == k for d, k in fixed)

    def _candidates(self, fixed):
        for d, k in fixed:
            if self._indices[d] is not None:
                return self._indices[d].get(k, ())
        d, k = fixed[0]
        self.build_index(d)
        return self._indices[d].get(k, ())

    def find_index(self, *keys):
        """Position of the entry with the given keys, -1 if absent"""
        self._validate_keys(keys)
        fixed = list(enumerate(keys))
        for pos in self._candidates(fixed):
            if self._match(pos, fixed):
                return pos
        return -1

    def contains(self, *keys):
        return self.find_index(*keys) >= 0

    def get(self, *keys):
        pos = self.find_index(*keys)
        return 0.0 if pos < 0 else self._values[pos]

    def _insert(self, value, keys):
        pos = len(self._values)
        for d, k in enumerate(keys):
            self._keys[d].append(k)
            if self._indices[d] is not None:
                self._indices[d].setdefault(k, set()).add(pos)
        self._values.append(float(value))

    def set(self, value, *keys):
        """Set the value of an entry, inserting it when absent"""
        pos = self.find_index(*keys)
        if pos >= 0:
            self._values[pos] = float(value)
        else:
            self._insert(value, keys)

    def add(self, value, *keys):
        """Accumulate onto an entry, inserting it when absent"""
        pos = self.find_index(*keys)
        if pos >= 0:
            self._values[pos] += value
        else:
            self._insert(value, keys)

    def remove(self, *keys):
        """Remove an entry. The last entry moves into the freed position.

        Returns
        -------
        res: bool
            True if an entry was removed.
        """
        pos = self.find_index(*keys)
        if pos < 0:
            return False

        last = len(self._values) - 1
        for d in range(self.num_dims):
            index = self._indices[d]
            if index is not None:
                self._unindex(index, self._keys[d][pos], pos)
                if pos != last:
                    self._unindex(index, self._keys[d][last], last)
                    index.setdefault(self._keys[d][last], set()).add(pos)
            if pos != last:
                self._keys[d][pos] = self._keys[d][last]
            self._keys[d].pop()

        if pos != last:
            self._values[pos] = self._values[last]
        self._values.pop()
        return True

    @staticmethod
    def _unindex(index, key, pos):
        positions = index[key]
        positions.discard(pos)
        if not positions:
            del index[key]

    def _fixed_keys(self, free_dims, other_keys):
        fixed_dims = [d for d in range(self.num_dims) if d not in free_dims]
        if len(other_keys) != len(fixed_dims):
            raise StructureError(
                "Expected {} keys but {}".format(len(fixed_dims), len(other_keys))
            )
        fixed = list(zip(fixed_dims, other_keys))
        for d, k in fixed:
            if not 0 <= k < self.dims[d]:
                raise StructureError(
                    "Key {} out of range [0, {}) in dimension {}".format(k, self.dims[d], d)
                )
        return fixed

    def fiber(self, dim, *other_keys):
        """Mode-`dim` fiber: entries matching `other_keys` on every other
        dimension (in dimension order), as a :obj:`SparseVector`."""
        fixed = self._fixed_keys((dim,), other_keys)
        values = {}
        for pos in self._candidates(fixed):
            if self._match(pos, fixed):
                values[self._keys[dim][pos]] = self._values[pos]
        return SparseVector.from_dict(self.dims[dim], values)

    def slice(self, row_dim, col_dim, *other_keys):
        """Slice over (row_dim, col_dim) with the remaining dimensions fixed
        to `other_keys` (in dimension order), as a :obj:`SparseMatrix`."""
        if row_dim == col_dim:
            raise ValueError("row_dim and col_dim must differ")
        fixed = self._fixed_keys((row_dim, col_dim), other_keys)
        table = {}
        for pos in self._candidates(fixed):
            if self._match(pos, fixed):
                table[self._keys[row_dim][pos], self._keys[col_dim][pos]] = self._values[pos]
        return SparseMatrix(self.dims[row_dim], self.dims[col_dim], table)

    def unfolding(self, n):
        """Mode-n matricization with shape (dims[n], prod of other dims)"""
        num_cols = 1
        strides = {}
        for d in range(self.num_dims):
            if d != n:
                strides[d] = num_cols
                num_cols *= self.dims[d]

        table = {}
        for pos in range(len(self._values)):
            col = sum(self._keys[d][pos] * stride for d, stride in strides.items())
            table[self._keys[n][pos], col] = self._values[pos]
        return SparseMatrix(self.dims[n], num_cols, table)

    def unfoldings(self):
        return [self.unfolding(n) for n in range(self.num_dims)]

    def rate_matrix(self):
        """Projection onto the (user, item) dimensions. When several entries
        share a (user, item) pair, the last one in entry order wins."""
        table = {}
        for u, i, v in zip(self._keys[self.user_dim], self._keys[self.item_dim], self._values):
            table[u, i] = v
        return SparseMatrix(self.dims[self.user_dim], self.dims[self.item_dim], table)

    def shuffle(self, seed=None):
        """Randomly reorder the entries. Built indices are rebuilt."""
        perm = get_rng(seed).permutation(len(self._values))
        for d in range(self.num_dims):
            self._keys[d] = [self._keys[d][p] for p in perm]
        self._values = [self._values[p] for p in perm]
        for d in range(self.num_dims):
            if self._indices[d] is not None:
                self.build_index(d)

    def inner(self, other):
        """Inner product with a tensor of the same dimensions"""
        if self.dims != other.dims:
            raise ValueError(
                "Dimensions mismatch: {} vs. {}".format(self.dims, other.dims)
            )
        res = 0.0
        for entry in self:
            res += entry.value * other.get(*entry.keys)
        return res

    def norm(self):
        """Frobenius norm"""
        return float(np.sqrt(np.sum(np.square(self._values))))

    def is_cubical(self):
        return len(set(self.dims)) == 1

    def is_diagonal(self):
        for pos in range(len(self._values)):
            if self._values[pos] != 0 and len(set(self.keys(pos))) > 1:
                return False
        return True

    def copy(self):
        return copy.deepcopy(self)

    def __str__(self):
        lines = ["N-Dimension: {}, Size: {}".format(self.num_dims, self.size())]
        for pos in range(len(self._values)):
            lines.append(
                "\t".join(str(k) for k in self.keys(pos)) + "\t{}".format(self._values[pos])
            )
        return "\n".join(lines) + "\n"
