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


class GivenN(BaseMethod):
    """For every user, a given number (or ratio) of random ratings is used
    for training and the remaining ones for test.

    Parameters
    ----------
    data: :obj:`librec.data.SparseMatrix`, required
        The full rating matrix.

    n: int or float, optional, default: 20
        An int keeps at most `n` ratings per user in training (given-n).
        A float in (0, 1) keeps that proportion of every user's ratings (given-ratio).

    seed: int, optional, default: None
        Random seed for reproducibility.

    verbose: bool, optional, default: False
        Output running log.

    """

    def __init__(self, data, n=20, seed=None, verbose=False, **kwargs):
        super().__init__(data=data, seed=seed, verbose=verbose, **kwargs)
        self.n = n

        train_data, test_data = DataSplitter(self._data, seed=seed).get_given(n)
        self.build(train_data=train_data, test_data=test_data)
