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

import logging
import os
import re
from collections import Counter
from collections import OrderedDict

import numpy as np

from ..exception import DataFormatError
from .sparse_matrix import SparseMatrix

log = logging.getLogger(__name__)

SEP_PATTERN = re.compile(r"[ \t,]+")

EPSILON = 1e-5


def tokenize(line):
    return [t for t in SEP_PATTERN.split(line.strip()) if t]


class RatingScale:
    """Distinct rating values observed in a dataset.

    Parameters
    ----------
    values: iterable of float, required
        All observed rating values (with repetitions).

    Attributes
    ----------
    scales: list of float
        Sorted distinct rating values, shifted by `epsilon`.

    distribution: :obj:`collections.Counter`
        Number of observations per (unshifted) rating value.

    epsilon: float
        Shift applied to all ratings, non-zero only when 0 is a rating value.

    quantum: float
        Half of the smallest step between two consecutive scale values.
    """

    def __init__(self, values):
        self.distribution = Counter(values)
        raw = sorted(self.distribution)
        self.epsilon = EPSILON if raw and raw[0] == 0.0 else 0.0
        self.scales = [v + self.epsilon for v in raw]

        steps = np.diff(self.scales)
        self.quantum = float(steps.min()) / 2.0 if len(steps) > 0 else 0.0

    @property
    def min(self):
        return self.scales[0] if self.scales else 0.0

    @property
    def max(self):
        return self.scales[-1] if self.scales else 0.0

    def __len__(self):
        return len(self.scales)

    def __str__(self):
        return "{" + ", ".join(
            "{}x{}".format(v, self.distribution[v]) for v in sorted(self.distribution)
        ) + "}"


class DataDAO:
    """Data access object reading a delimited rating file into a
    :obj:`SparseMatrix`.

    Each line holds ``user item rating [timestamp]`` separated by spaces,
    tabs or commas. Inner indices are assigned to raw IDs in first-seen order.

    Parameters
    ----------
    path: str, required
        Path to the rating file.

    user_ids: dict, optional, default: None
        Mapping raw user ID -> inner index to start from. Passing the map of
        another DAO makes both share one user index space.

    item_ids: dict, optional, default: None
        Mapping raw item ID -> inner index. If it is the very same object as
        `user_ids`, items are treated as users (e.g., social relations).
    """

    def __init__(self, path, user_ids=None, item_ids=None):
        self.path = path
        self.user_ids = OrderedDict() if user_ids is None else user_ids
        self.item_ids = OrderedDict() if item_ids is None else item_ids
        self.is_item_as_user = self.user_ids is self.item_ids

        self.rate_matrix = None
        self.timestamps = None
        self.scale = None
        self.num_rates = 0

    @property
    def num_users(self):
        return len(self.user_ids)

    @property
    def num_items(self):
        return len(self.item_ids)

    def user_raw_ids(self):
        """Raw user IDs ordered by inner index"""
        return list(self.user_ids.keys())

    def item_raw_ids(self):
        """Raw item IDs ordered by inner index"""
        return list(self.item_ids.keys())

    def get_user_id(self, inner_idx):
        return self.user_raw_ids()[inner_idx]

    def get_item_id(self, inner_idx):
        return self.item_raw_ids()[inner_idx]

    @staticmethod
    def _inner_id(id_map, raw_id):
        idx = id_map.get(raw_id)
        if idx is None:
            idx = len(id_map)
            id_map[raw_id] = idx
        return idx

    def _parse_line(self, tokens, line_no, columns):
        if len(tokens) <= max(columns):
            raise DataFormatError(
                self.path,
                line_no,
                "expected at least {} columns but {}".format(max(columns) + 1, len(tokens)),
            )
        try:
            rating = float(tokens[columns[2]])
            timestamp = int(float(tokens[columns[3]])) if len(columns) > 3 else None
        except ValueError as e:
            raise DataFormatError(self.path, line_no, str(e))
        return tokens[columns[0]], tokens[columns[1]], rating, timestamp

    def read_data(self, columns=(0, 1, 2), threshold=None):
        """Read the rating file.

        Parameters
        ----------
        columns: tuple of int, optional, default: (0, 1, 2)
            Column positions of user, item, rating and, optionally, timestamp.

        threshold: float, optional, default: None
            When given (and non-negative), ratings >= threshold become 1.0
            and lower ratings are discarded.

        Returns
        -------
        rate_matrix: :obj:`SparseMatrix`
            The rating matrix of shape (num_users, num_items).
        """
        if len(columns) not in (3, 4):
            raise ValueError("columns must hold 3 or 4 positions but {}".format(columns))
        if threshold is not None and threshold < 0:
            threshold = None

        table = OrderedDict()
        timestamps = {} if len(columns) > 3 else None

        with open(self.path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                tokens = tokenize(line)
                if not tokens:
                    raise DataFormatError(self.path, line_no, "blank line")

                raw_u, raw_i, rating, timestamp = self._parse_line(tokens, line_no, columns)
                if threshold is not None:
                    if rating < threshold:
                        continue
                    rating = 1.0

                u = self._inner_id(self.user_ids, raw_u)
                i = self._inner_id(self.item_ids, raw_i)
                table[u, i] = rating
                if timestamps is not None:
                    timestamps[u, i] = timestamp

        self.num_rates = len(table)
        self.scale = RatingScale(table.values())
        if self.scale.epsilon > 0:
            for key in table:
                table[key] += self.scale.epsilon

        num_rows = self.num_users
        num_cols = self.num_users if self.is_item_as_user else self.num_items
        self.rate_matrix = SparseMatrix(num_rows, num_cols, table)
        self.timestamps = timestamps

        log.debug(
            "%s: %d users, %d items, %d ratings, scales: %s",
            os.path.basename(self.path),
            num_rows,
            num_cols,
            self.num_rates,
            self.scale.scales,
        )
        return self.rate_matrix

    def specs(self):
        """Dataset statistics as a list of lines"""
        if self.rate_matrix is None:
            self.read_data()

        mat = self.rate_matrix
        _, _, data = mat.uir_tuple
        values, counts = np.unique(data, return_counts=True)

        lines = ["Dataset: {}".format(self.path)]
        lines.append("User amount: {}".format(self.num_users))
        if not self.is_item_as_user:
            lines.append("Item amount: {}".format(self.num_items))
        lines.append("Rate amount: {}".format(self.num_rates))
        if self.num_rates == 0:
            return lines

        lines.append("Scales dist: {}".format(self.scale))
        lines.append("Mean: {:.6f}".format(data.mean()))
        lines.append("Std : {:.6f}".format(data.std()))
        lines.append("Mode: {:.6f}".format(values[np.argmax(counts)]))
        lines.append("Median: {:.6f}".format(np.median(data)))

        user_counts = np.diff(mat.to_csr().indptr)
        user_counts = user_counts[user_counts > 0]
        lines.append("User mean: {:.6f}".format(user_counts.mean()))
        lines.append("User Std : {:.6f}".format(user_counts.std()))

        if not self.is_item_as_user:
            item_counts = np.diff(mat.to_csr().tocsc().indptr)
            item_counts = item_counts[item_counts > 0]
            lines.append("Item mean: {:.6f}".format(item_counts.mean()))
            lines.append("Item Std : {:.6f}".format(item_counts.std()))

        return lines

    def print_specs(self):
        lines = self.specs()
        log.info("\n%s", "\n".join(lines))
        return lines

    def write_matrix(self, matrix, path):
        """Write the nonzero entries of `matrix` as ``user item rating [timestamp]``
        lines using raw IDs. The epsilon shift is undone."""
        users = self.user_raw_ids()
        items = users if self.is_item_as_user else self.item_raw_ids()
        eps = 0.0 if self.scale is None else self.scale.epsilon

        dirname = os.path.dirname(path)
        if dirname:
            os.makedirs(dirname, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            for u, i, r in zip(*matrix.uir_tuple):
                u, i = int(u), int(i)
                line = "{} {} {}".format(users[u], items[i], float(r) - eps)
                if self.timestamps is not None and (u, i) in self.timestamps:
                    line += " {}".format(self.timestamps[u, i])
                f.write(line + "\n")

        log.debug("Wrote %d ratings to %s", matrix.size(), path)
        return path
