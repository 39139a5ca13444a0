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
import numbers

import numpy as np

from ..utils import get_rng
from ..utils import validate_ratio
from .sparse_matrix import SparseMatrix

log = logging.getLogger(__name__)


class DataSplitter:
    """Split a rating matrix into train/test (and validation) matrices.

    Every output keeps the shape of the input matrix, so that all splits
    share the same user and item index spaces.

    Parameters
    ----------
    rate_matrix: :obj:`librec.data.SparseMatrix`, required
        The full rating matrix.

    k_fold: int, optional, default: None
        If given, ratings are partitioned into `k_fold` folds right away.

    seed: int, optional, default: None
        Random seed for reproducible splits.
    """

    def __init__(self, rate_matrix, k_fold=None, seed=None):
        self.rate_matrix = rate_matrix
        self.seed = seed
        self.rng = get_rng(seed)
        self._u, self._i, self._r = rate_matrix.uir_tuple
        self.n_ratings = len(self._r)
        self.n_folds = None
        self._partition = None

        if k_fold is not None:
            self.k_fold(k_fold)

    def _build(self, idx):
        idx = np.sort(np.asarray(idx, dtype=np.int64))
        return SparseMatrix.from_entries(
            self.rate_matrix.num_rows,
            self.rate_matrix.num_columns,
            self._u[idx],
            self._i[idx],
            self._r[idx],
        )

    def _check_sizes(self, **sizes):
        for name, size in sizes.items():
            if size == 0:
                raise ValueError(
                    "The split leaves the {} set empty ({} ratings)".format(name, self.n_ratings)
                )

    def get_ratio(self, train_ratio, val_ratio=None):
        """Random split of the ratings into train and test.

        Ratings are shuffled and the first ``round(train_ratio * n)`` of them
        go to train, so the train size is exact rather than drawn per rating.

        Returns
        -------
        res: tuple
            (train, test), or (train, validation, test) if `val_ratio` is given.
        """
        train_ratio = validate_ratio(train_ratio, "train_ratio")
        perm = self.rng.permutation(self.n_ratings)
        n_train = int(round(train_ratio * self.n_ratings))

        if val_ratio is None:
            self._check_sizes(train=n_train, test=self.n_ratings - n_train)
            log.debug("ratio split: %d train, %d test", n_train, self.n_ratings - n_train)
            return self._build(perm[:n_train]), self._build(perm[n_train:])

        val_ratio = validate_ratio(val_ratio, "val_ratio")
        if train_ratio + val_ratio >= 1.0:
            raise ValueError(
                "train_ratio + val_ratio must be < 1 but {}".format(train_ratio + val_ratio)
            )
        n_val = int(round(val_ratio * self.n_ratings))
        n_test = self.n_ratings - n_train - n_val
        self._check_sizes(train=n_train, validation=n_val, test=n_test)
        return (
            self._build(perm[:n_train]),
            self._build(perm[n_train : n_train + n_val]),
            self._build(perm[n_train + n_val :]),
        )

    def _timestamps_of(self, timestamps):
        if timestamps is None:
            raise ValueError("timestamps are required for a chronological split")
        try:
            return np.asarray(
                [timestamps[int(u), int(i)] for u, i in zip(self._u, self._i)],
                dtype=np.int64,
            )
        except KeyError as e:
            raise ValueError("Missing timestamp for rating {}".format(e.args[0]))

    def _chrono_split(self, groups, ts, ratio):
        train_idx, test_idx = [], []
        for group in groups:
            ordered = group[np.argsort(ts[group], kind="stable")]
            n_train = int(round(ratio * len(ordered)))
            train_idx.extend(ordered[:n_train])
            test_idx.extend(ordered[n_train:])

        self._check_sizes(train=len(train_idx), test=len(test_idx))
        return self._build(train_idx), self._build(test_idx)

    def _groups(self, keys):
        order = np.argsort(keys, kind="stable")
        bounds = np.flatnonzero(np.diff(keys[order])) + 1
        return np.split(order, bounds)

    def get_ratio_by_user_date(self, ratio, timestamps):
        """For each user, the earliest `ratio` of the ratings go to train"""
        ratio = validate_ratio(ratio)
        return self._chrono_split(self._groups(self._u), self._timestamps_of(timestamps), ratio)

    def get_ratio_by_item_date(self, ratio, timestamps):
        """For each item, the earliest `ratio` of the ratings go to train"""
        ratio = validate_ratio(ratio)
        return self._chrono_split(self._groups(self._i), self._timestamps_of(timestamps), ratio)

    def get_ratio_by_rating_date(self, ratio, timestamps):
        """The earliest `ratio` of all ratings go to train"""
        ratio = validate_ratio(ratio)
        return self._chrono_split(
            [np.arange(self.n_ratings)], self._timestamps_of(timestamps), ratio
        )

    def get_given(self, n):
        """Per user, keep `n` random ratings in train and test on the rest.

        Parameters
        ----------
        n: int or float
            An int keeps ``min(n, n_u)`` ratings of each user. A float in
            (0, 1) keeps ``round(n * n_u)`` ratings of each user.
        """
        if isinstance(n, (numbers.Integral, np.integer)) and not isinstance(n, bool):
            if n <= 0:
                raise ValueError("n must be positive but {}".format(n))

            def n_given(size):
                return min(int(n), size)
        else:
            ratio = validate_ratio(n, "n")

            def n_given(size):
                return int(round(ratio * size))

        train_idx, test_idx = [], []
        for group in self._groups(self._u):
            perm = group[self.rng.permutation(len(group))]
            n_train = n_given(len(group))
            train_idx.extend(perm[:n_train])
            test_idx.extend(perm[n_train:])

        self._check_sizes(train=len(train_idx), test=len(test_idx))
        return self._build(train_idx), self._build(test_idx)

    def k_fold(self, k):
        """Assign every rating to one of `k` balanced random folds"""
        if not isinstance(k, (numbers.Integral, np.integer)) or k < 2:
            raise ValueError("k must be an integer >= 2 but {}".format(k))
        if self.n_ratings < k:
            raise ValueError(
                "Cannot split {} ratings into {} folds".format(self.n_ratings, k)
            )

        fold_size = int(self.n_ratings / k)
        remain_size = self.n_ratings - fold_size * k

        partition = np.repeat(np.arange(k), fold_size)
        self.rng.shuffle(partition)

        if remain_size > 0:
            remain_partition = self.rng.choice(k, size=remain_size, replace=True, p=None)
            partition = np.concatenate((partition, remain_partition))

        self.n_folds = int(k)
        self._partition = partition
        return partition

    def get_kth_fold(self, k):
        """Fold `k` (0-based) as test, all other folds as train"""
        if self._partition is None:
            raise ValueError("k_fold() has to be called before get_kth_fold()")
        if not 0 <= k < self.n_folds:
            raise ValueError("Fold index must be in [0, {}) but {}".format(self.n_folds, k))

        test_idx = np.where(self._partition == k)[0]
        train_idx = np.where(self._partition != k)[0]
        return self._build(train_idx), self._build(test_idx)
