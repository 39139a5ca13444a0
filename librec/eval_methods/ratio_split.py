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

from ..data import DataSplitter
from .base_method import BaseMethod

BY_DATE_OPTIONS = ("user", "item", "rating")


class RatioSplit(BaseMethod):
    """Splitting data into training, (validation,) and test sets by ratio.
    Ratings are shuffled before the split, unless a chronological
    split is requested.

    Parameters
    ----------
    data: :obj:`librec.data.SparseMatrix`, required
        The full rating matrix.

    train_ratio: float, optional, default: 0.8
        The proportion of the training set.

    val_ratio: float, optional, default: None
        The proportion of the validation set. Requires train_ratio + val_ratio < 1.

    by_date: str, optional, default: None
        Chronological split: 'user' (per user), 'item' (per item) or
        'rating' (over all ratings). The earliest ratings go to training.

    timestamps: dict, optional, default: None
        Mapping (user_idx, item_idx) -> timestamp, required by `by_date`.

    seed: int, optional, default: None
        Random seed for reproducibility.

    verbose: bool, optional, default: False
        Output running log.

    """

    def __init__(self, data, train_ratio=0.8, val_ratio=None, by_date=None,
                 timestamps=None, seed=None, verbose=False, **kwargs):
        super().__init__(data=data, seed=seed, verbose=verbose, **kwargs)

        if by_date is not None and by_date not in BY_DATE_OPTIONS:
            raise ValueError('by_date must be one of {} but {}'.format(BY_DATE_OPTIONS, by_date))
        if by_date is not None and val_ratio is not None:
            raise ValueError('Validation set is not supported by chronological splits')

        self.train_ratio = train_ratio
        self.val_ratio = val_ratio
        self.by_date = by_date
        self.timestamps = timestamps
        self._split()

    def _split(self):
        splitter = DataSplitter(self._data, seed=self.seed)

        if self.by_date == 'user':
            train_data, test_data = splitter.get_ratio_by_user_date(self.train_ratio, self.timestamps)
        elif self.by_date == 'item':
            train_data, test_data = splitter.get_ratio_by_item_date(self.train_ratio, self.timestamps)
        elif self.by_date == 'rating':
            train_data, test_data = splitter.get_ratio_by_rating_date(self.train_ratio, self.timestamps)
        elif self.val_ratio is not None:
            train_data, val_data, test_data = splitter.get_ratio(self.train_ratio, self.val_ratio)
            return self.build(train_data=train_data, test_data=test_data, val_data=val_data)
        else:
            train_data, test_data = splitter.get_ratio(self.train_ratio)

        return self.build(train_data=train_data, test_data=test_data)
