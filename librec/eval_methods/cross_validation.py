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

from ..data import DataSplitter
from ..experiment.result import CVResult
from ..experiment.result import Result
from .base_method import BaseMethod
from .base_method import MetricAccumulator

log = logging.getLogger(__name__)


class CrossValidation(BaseMethod):
    """Cross Validation Evaluation Method.

    Parameters
    ----------
    data: :obj:`librec.data.SparseMatrix`, required
        The full rating matrix.

    n_folds: int, optional, default: 5
        The number of folds for cross validation.

    parallel: bool, optional, default: False
        When True, folds run in a thread pool with one worker per fold.
        Otherwise they run one after the other.

    seed: int, optional, default: None
        Random seed for reproducibility.

    verbose: bool, optional, default: False
        Output running log.

    Attributes
    ----------
    last_result: :obj:`librec.experiment.CVResult`
        Result of the last evaluation, kept even when some folds failed.
    """

    def __init__(self, data, n_folds=5, parallel=False, seed=None, verbose=False, **kwargs):
        super().__init__(data=data, seed=seed, verbose=verbose, **kwargs)

        self.n_folds = n_folds
        self.parallel = parallel
        self.splitter = DataSplitter(self._data, seed=seed)
        self._partition = self.splitter.k_fold(n_folds)
        self.last_result = None

    def _get_train_test(self, fold):
        if self.verbose:
            log.info("Fold: %d", fold + 1)
        return self.splitter.get_kth_fold(fold)

    def _run_fold(self, fold, model, metrics, save_dir):
        train_set, test_set = self._get_train_test(fold)
        method = BaseMethod.from_splits(
            train_data=train_set, test_data=test_set, seed=self.seed, verbose=self.verbose
        )
        new_model = model.clone()  # clone a completely new model
        fold_result, _ = method.evaluate(
            new_model, metrics, show_validation=False, save_dir=save_dir, fold=fold + 1
        )
        return fold_result

    def evaluate(self, model, metrics, show_validation=False, save_dir=None, **kwargs):
        """Train and evaluate a clone of `model` on every fold.

        A failing fold is logged and excluded from the averages. After all
        folds finish, the first failure is raised again; the partial result
        stays available in `last_result`.

        Returns
        -------
        res: (:obj:`librec.experiment.CVResult`, None)
        """
        accumulator = MetricAccumulator()
        failures = []

        def task(fold):
            fold_result = self._run_fold(fold, model, metrics, save_dir)
            accumulator.add(fold, fold_result.metric_avg_results)

        if self.parallel:
            with ThreadPoolExecutor(max_workers=self.n_folds) as executor:
                futures = [(fold, executor.submit(task, fold)) for fold in range(self.n_folds)]
                for fold, future in futures:
                    error = future.exception()
                    if error is not None:
                        failures.append((fold, error))
        else:
            for fold in range(self.n_folds):
                try:
                    task(fold)
                except Exception as error:
                    failures.append((fold, error))

        result = CVResult(model.name)
        for fold, metric_avg_results in accumulator.items():
            result.add(fold + 1, Result(model.name, metric_avg_results))
        for fold, error in failures:
            log.error("[%s] fold %d failed: %s", model.name, fold + 1, error)
            result.failed_folds.append(fold + 1)
        result.organize()

        self.last_result = result
        if failures:
            raise failures[0][1]

        return result, None  # no validation result of CV
