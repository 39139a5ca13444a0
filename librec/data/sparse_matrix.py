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

import numpy as np
import scipy.sparse as sp

from ..exception import StructureError


class SparseVector:
    """Sparse vector holding (index, value) pairs sorted by index.

    Parameters
    ----------
    capacity: int, required
        Length of the equivalent dense vector.

    indices: array-like, optional, default: None
        Positions of the stored values.

    data: array-like, optional, default: None
        Stored values, aligned with `indices`.
    """

    def __init__(self, capacity, indices=None, data=None):
        self.capacity = capacity
        indices = np.asarray([] if indices is None else indices, dtype=np.int64)
        data = np.asarray([] if data is None else data, dtype=np.float64)
        if len(indices) != len(data):
            raise ValueError("indices and data must have the same length")

        order = np.argsort(indices, kind="stable")
        self.indices = indices[order]
        self.data = data[order]

    @classmethod
    def from_dict(cls, capacity, values):
        keys = sorted(values)
        return cls(capacity, keys, [values[k] for k in keys])

    def _position(self, idx):
        pos = np.searchsorted(self.indices, idx)
        if pos < len(self.indices) and self.indices[pos] == idx:
            return pos
        return -1

    def get(self, idx):
        pos = self._position(idx)
        return 0.0 if pos < 0 else float(self.data[pos])

    def contains(self, idx):
        return self._position(idx) >= 0

    def size(self):
        """Number of stored entries"""
        return len(self.indices)

    def __len__(self):
        return len(self.indices)

    def __iter__(self):
        for idx, val in zip(self.indices, self.data):
            yield int(idx), float(val)

    def __contains__(self, idx):
        return self.contains(idx)

    def to_dict(self):
        return {idx: val for idx, val in self}

    def to_dense(self):
        dense = np.zeros(self.capacity, dtype=np.float64)
        dense[self.indices] = self.data
        return dense

    def sum(self):
        return float(self.data.sum())

    def mean(self):
        return float(self.data.mean()) if len(self.data) > 0 else 0.0

    def inner(self, dense):
        """Inner product with a dense vector"""
        return float(np.dot(self.data, np.asarray(dense)[self.indices]))

    def __str__(self):
        return "{}\t{}\n{}".format(
            self.capacity,
            self.size(),
            "\n".join("{}\t{}".format(idx, val) for idx, val in self),
        )


class MatrixEntry:
    """A nonzero entry of a :obj:`SparseMatrix` visited by iteration.
    Writes go to both the row- and the column-compressed layouts."""

    __slots__ = ("matrix", "row", "column", "_pos")

    def __init__(self, matrix, row, pos):
        self.matrix = matrix
        self.row = row
        self.column = int(matrix.col_ind[pos])
        self._pos = pos

    @property
    def value(self):
        return float(self.matrix.row_data[self._pos])

    def set(self, value):
        self.matrix.row_data[self._pos] = value
        self.matrix.col_data[self.matrix._ccs_index(self.row, self.column)] = value

    def remove(self):
        """Zero the value. The structure itself is not compacted."""
        self.set(0.0)

    def __repr__(self):
        return "MatrixEntry(row={}, column={}, value={})".format(
            self.row, self.column, self.value
        )


class SparseMatrix:
    """Sparse rating matrix kept in both Compressed Row Storage (CRS) and
    Compressed Column Storage (CCS).

    A value of 0 means "unobserved": zero values are skipped by
    :meth:`size`, row/column views and iteration.

    Parameters
    ----------
    num_rows: int, required
        Number of rows (users).

    num_cols: int, required
        Number of columns (items).

    data_table: dict, required
        Mapping ``(row, col) -> value`` of the stored entries.

    col_map: dict, optional, default: None
        Mapping ``col -> rows`` used to lay out the column storage.
        If None, it is derived from `data_table`.

    Attributes
    ----------
    row_ptr, col_ind, row_data: Numpy arrays
        CRS layout: entries of row ``r`` are at ``row_ptr[r]:row_ptr[r + 1]``
        with ascending column indices.

    col_ptr, row_ind, col_data: Numpy arrays
        CCS layout, symmetric to the CRS one.
    """

    def __init__(self, num_rows, num_cols, data_table, col_map=None):
        self.num_rows = int(num_rows)
        self.num_columns = int(num_cols)

        n = len(data_table)
        rows = np.fromiter((k[0] for k in data_table), dtype=np.int64, count=n)
        cols = np.fromiter((k[1] for k in data_table), dtype=np.int64, count=n)
        vals = np.fromiter(data_table.values(), dtype=np.float64, count=n)
        self._check_range(rows, cols)

        self.row_ptr, self.col_ind, self.row_data = self._compress(
            rows, cols, vals, self.num_rows
        )

        if col_map is not None:
            pairs = [(r, c) for c, c_rows in col_map.items() for r in c_rows]
            missing = [p for p in pairs if p not in data_table]
            if missing:
                raise ValueError(
                    "col_map refers to entries missing in data_table: {}".format(missing[:5])
                )
            # each entry of data_table exactly once
            if len(pairs) != len(data_table) or len(set(pairs)) != len(pairs):
                raise ValueError(
                    "col_map must list each of the {} entries once but has {} ({} distinct)".format(
                        len(data_table), len(pairs), len(set(pairs))
                    )
                )
            rows = np.asarray([p[0] for p in pairs], dtype=np.int64)
            cols = np.asarray([p[1] for p in pairs], dtype=np.int64)
            vals = np.asarray([data_table[p] for p in pairs], dtype=np.float64)
            self._check_range(rows, cols)

        self.col_ptr, self.row_ind, self.col_data = self._compress(
            cols, rows, vals, self.num_columns
        )

    def _check_range(self, rows, cols):
        if len(rows) == 0:
            return
        if rows.min() < 0 or rows.max() >= self.num_rows:
            raise ValueError("Row index out of range [0, {})".format(self.num_rows))
        if cols.min() < 0 or cols.max() >= self.num_columns:
            raise ValueError("Column index out of range [0, {})".format(self.num_columns))

    @staticmethod
    def _compress(major, minor, vals, num_major):
        order = np.lexsort((minor, major))
        counts = np.bincount(major, minlength=num_major)
        ptr = np.zeros(num_major + 1, dtype=np.int64)
        np.cumsum(counts, out=ptr[1:])
        return ptr, minor[order].copy(), vals[order].copy()

    @classmethod
    def from_entries(cls, num_rows, num_cols, rows, cols, vals):
        """Build a matrix from parallel arrays. For duplicated positions
        the last value wins."""
        data_table = {}
        for r, c, v in zip(rows, cols, vals):
            data_table[int(r), int(c)] = float(v)
        return cls(num_rows, num_cols, data_table)

    @classmethod
    def from_csr(cls, csr_mat):
        coo = sp.coo_matrix(csr_mat)
        return cls.from_entries(coo.shape[0], coo.shape[1], coo.row, coo.col, coo.data)

    def to_csr(self):
        """Return a scipy csr_matrix of the nonzero entries"""
        csr = sp.csr_matrix(
            (self.row_data.copy(), self.col_ind.copy(), self.row_ptr.copy()),
            shape=self.shape,
        )
        csr.eliminate_zeros()
        return csr

    def copy(self):
        mat = self.__class__.__new__(self.__class__)
        mat.num_rows = self.num_rows
        mat.num_columns = self.num_columns
        for name in ("row_ptr", "col_ind", "row_data", "col_ptr", "row_ind", "col_data"):
            setattr(mat, name, getattr(self, name).copy())
        return mat

    @property
    def shape(self):
        return self.num_rows, self.num_columns

    def _check_bounds(self, row, col):
        if not (0 <= row < self.num_rows and 0 <= col < self.num_columns):
            raise StructureError(
                "Entry ({}, {}) is outside the matrix shape {}".format(row, col, self.shape)
            )

    def _crs_index(self, row, col):
        start, end = self.row_ptr[row], self.row_ptr[row + 1]
        pos = start + np.searchsorted(self.col_ind[start:end], col)
        return pos if pos < end and self.col_ind[pos] == col else -1

    def _ccs_index(self, row, col):
        start, end = self.col_ptr[col], self.col_ptr[col + 1]
        pos = start + np.searchsorted(self.row_ind[start:end], row)
        return pos if pos < end and self.row_ind[pos] == row else -1

    def _indices(self, row, col):
        self._check_bounds(row, col)
        i, j = self._crs_index(row, col), self._ccs_index(row, col)
        if i < 0 or j < 0:
            raise StructureError(
                "Entry ({}, {}) is not in the sparse structure".format(row, col)
            )
        return i, j

    def get(self, row, col):
        """Value at (row, col), 0 when the position is not stored"""
        self._check_bounds(row, col)
        pos = self._crs_index(row, col)
        return 0.0 if pos < 0 else float(self.row_data[pos])

    def set(self, row, col, val):
        """Overwrite the value of an existing position in both layouts"""
        i, j = self._indices(row, col)
        self.row_data[i] = val
        self.col_data[j] = val

    def add(self, row, col, val):
        """Accumulate on an existing position in both layouts"""
        i, j = self._indices(row, col)
        self.row_data[i] += val
        self.col_data[j] += val

    def row(self, row, except_col=None):
        """Nonzero entries of a row as a :obj:`SparseVector` over columns"""
        start, end = self.row_ptr[row], self.row_ptr[row + 1]
        indices, data = self.col_ind[start:end], self.row_data[start:end]
        mask = data != 0
        if except_col is not None:
            mask &= indices != except_col
        return SparseVector(self.num_columns, indices[mask], data[mask])

    def col(self, col):
        """Nonzero entries of a column as a :obj:`SparseVector` over rows"""
        start, end = self.col_ptr[col], self.col_ptr[col + 1]
        indices, data = self.row_ind[start:end], self.col_data[start:end]
        mask = data != 0
        return SparseVector(self.num_rows, indices[mask], data[mask])

    def row_size(self, row):
        start, end = self.row_ptr[row], self.row_ptr[row + 1]
        return int(np.count_nonzero(self.row_data[start:end]))

    def col_size(self, col):
        start, end = self.col_ptr[col], self.col_ptr[col + 1]
        return int(np.count_nonzero(self.col_data[start:end]))

    def rows(self):
        """Indices of rows having at least one nonzero entry"""
        return [r for r in range(self.num_rows) if self.row_size(r) > 0]

    def columns(self):
        """Indices of columns having at least one nonzero entry"""
        return [c for c in range(self.num_columns) if self.col_size(c) > 0]

    def size(self):
        """Number of nonzero entries"""
        return int(np.count_nonzero(self.row_data))

    def __iter__(self):
        for r in range(self.num_rows):
            for pos in range(self.row_ptr[r], self.row_ptr[r + 1]):
                if self.row_data[pos] != 0:
                    yield MatrixEntry(self, r, pos)

    @property
    def uir_tuple(self):
        """Row-major (row_indices, col_indices, values) of the nonzero entries"""
        rows = np.repeat(np.arange(self.num_rows, dtype=np.int64), np.diff(self.row_ptr))
        mask = self.row_data != 0
        return rows[mask], self.col_ind[mask].copy(), self.row_data[mask].copy()

    def _nonzero_data(self):
        return self.row_data[self.row_data != 0]

    def sum(self):
        return float(self._nonzero_data().sum())

    def mean(self):
        data = self._nonzero_data()
        return float(data.mean()) if len(data) > 0 else 0.0

    def min(self):
        data = self._nonzero_data()
        return float(data.min()) if len(data) > 0 else 0.0

    def max(self):
        data = self._nonzero_data()
        return float(data.max()) if len(data) > 0 else 0.0

    def __str__(self):
        lines = ["{}\t{}\t{}".format(self.num_rows, self.num_columns, self.size())]
        for me in self:
            lines.append("{}\t{}\t{:f}".format(me.row + 1, me.column + 1, me.value))
        return "\n".join(lines) + "\n"
