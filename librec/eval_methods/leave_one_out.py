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
from concurrent.futures import ThreadPoolExecutor

from ..data import SparseMatrix
from ..experiment.result import Result
from .base_method import BaseMethod
from .base_method import MetricAccumulator

log = logging.getLogger(__name__)


class LeaveOneOut(BaseMethod):
    """Leave-one-out Evaluation Method.

    Every observed rating makes one trial: a clone of the model is trained
    on the matrix with that rating zeroed, then tested on it alone. Metric
    values of the trials are summed and divided by the number of ratings.

    Parameters
    ----------
    data: :obj:`librec.data.SparseMatrix`, required
        The full rating matrix.

    num_threads: int, optional, default: 1
        Number of trials run at the same time.

    seed: int, optional, default: None
        Random seed for reproducibility.

    verbose: bool, optional, default: False
        Output running log.
    """

    def __init__(self, data, num_threads=1, seed=None, verbose=False, **kwargs):
        super().__init__(data=data, seed=seed, verbose=verbose, **kwargs)

        if num_threads < 1:
            raise ValueError("num_threads has to be positive but {}".format(num_threads))
        if data.size() < 2:
            raise ValueError("Leave-one-out needs at least two ratings")

        self.num_threads = num_threads

    def _get_train_test(self, user_idx, item_idx, rating):
        train_set = self._data.copy()
        train_set.set(user_idx, item_idx, 0.0)
        test_set = SparseMatrix.from_entries(
            self._data.num_rows, self._data.num_columns, [user_idx], [item_idx], [rating]
        )
        return train_set, test_set

    def _run_trial(self, user_idx, item_idx, rating, model, metrics):
        train_set, test_set = self._get_train_test(user_idx, item_idx, rating)
        method = BaseMethod.from_splits(train_data=train_set, test_data=test_set, seed=self.seed)
        trial_result, _ = method.evaluate(model.clone(), metrics, show_validation=False)
        return trial_result

    def evaluate(self, model, metrics, show_validation=False, **kwargs):
        """Run one trial per rating and average the metrics over all ratings.

        Returns
        -------
        res: (:obj:`librec.experiment.Result`, None)
        """
        accumulator = MetricAccumulator()
        (u_indices, i_indices, r_values) = self._data.uir_tuple
        trials = list(zip(u_indices.tolist(), i_indices.tolist(), r_values.tolist()))

        if self.verbose:
            log.info(
                "[%s] Leave-one-out over %d ratings with %d thread(s)",
                model.name,
                len(trials),
                self.num_threads,
            )

        def task(idx):
            user_idx, item_idx, rating = trials[idx]
            trial_result = self._run_trial(user_idx, item_idx, rating, model, metrics)
            accumulator.add(idx, trial_result.metric_avg_results)

        with ThreadPoolExecutor(max_workers=self.num_threads) as executor:
            # list() re-raises the first failing trial
            list(executor.map(task, range(len(trials))))

        return Result(model.name, accumulator.average(size=len(trials))), None
