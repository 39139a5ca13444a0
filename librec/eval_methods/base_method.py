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
import threading
import time
from collections import OrderedDict

import numpy as np
from tqdm.auto import tqdm

from ..experiment.result import Result
from ..metrics import RatingMetric
from ..utils import get_rng

log = logging.getLogger(__name__)

TRAIN_TIME = "Train (ms)"
TEST_TIME = "Test (ms)"


def rating_eval(model, metrics, test_set, verbose=False):
    """Predict every rating of `test_set` and score the predictions.

    Parameters
    ----------
    model: :obj:`librec.models.Recommender`, required
        A fitted model.

    metrics: list of :obj:`librec.metrics.RatingMetric`, required
        Metrics computed over all test ratings.

    test_set: :obj:`librec.data.SparseMatrix`, required
        Ratings to be predicted.

    verbose: bool, optional, default: False
        Show a progress bar.

    Returns
    -------
    res: list
        One value per metric, in the order of `metrics`.
    """
    if not metrics:
        return []

    users, items, ratings = test_set.uir_tuple
    predictions = np.fromiter(
        tqdm(
            (model.rate(u, i) for u, i in zip(users, items)),
            total=len(ratings),
            desc="Rating",
            miniters=100,
            disable=not verbose,
        ),
        dtype=np.float64,
        count=len(ratings),
    )
    return [float(mt.compute(gt_ratings=ratings, pd_ratings=predictions)) for mt in metrics]


class MetricAccumulator:
    """Thread-safe store of metric results keyed by run (fold or trial).

    Sums are taken in key order, so they do not depend on the order in
    which concurrent runs complete.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._results = {}

    def add(self, key, metric_results):
        with self._lock:
            self._results[key] = OrderedDict(metric_results)

    def __len__(self):
        with self._lock:
            return len(self._results)

    def items(self):
        with self._lock:
            return sorted(self._results.items())

    def sums(self):
        sums = OrderedDict()
        for _, metric_results in self.items():
            for tag, value in metric_results.items():
                sums[tag] = sums.get(tag, 0.0) + value
        return sums

    def average(self, size=None):
        """Sums divided by `size`, by default the number of runs"""
        size = len(self) if size is None else size
        return OrderedDict((tag, s / size) for tag, s in self.sums().items())


class BaseMethod:
    """Evaluation plan with a fixed train/test (and optional validation) split.

    Sub-classes produce the split from the full rating matrix; the plain
    class is built from ready-made matrices with :meth:`from_splits`.

    Parameters
    ----------
    data: :obj:`librec.data.SparseMatrix`, optional, default: None
        The full rating matrix to be split by sub-classes.

    seed: int, optional, default: None
        Seed of the split.

    verbose: bool, optional, default: False
        Log split sizes and evaluation steps.
    """

    def __init__(self, data=None, seed=None, verbose=False, **kwargs):
        self._data = data
        self.seed = seed
        self.rng = get_rng(seed)
        self.verbose = verbose
        self.train_set = None
        self.val_set = None
        self.test_set = None
        self.rating_metrics = []

    def _organize_metrics(self, metrics):
        if not isinstance(metrics, (list, tuple)):
            raise ValueError("metrics must be a list but {}".format(type(metrics)))

        rating_metrics = [mt for mt in metrics if isinstance(mt, RatingMetric)]
        self.rating_metrics = sorted(rating_metrics, key=lambda mt: mt.name)

    def build(self, train_data, test_data, val_data=None):
        for name, matrix in (("train", train_data), ("test", test_data)):
            if matrix is None or matrix.size() == 0:
                raise ValueError("{} data is missing or has no ratings".format(name))

        self.train_set = train_data
        self.test_set = test_data
        self.val_set = val_data

        if self.verbose:
            log.info(
                "Ratings: %d train, %d test%s",
                train_data.size(),
                test_data.size(),
                "" if val_data is None else ", %d validation" % val_data.size(),
            )
        return self

    def _eval(self, model, test_set):
        values = rating_eval(model, self.rating_metrics, test_set, verbose=self.verbose)
        return Result(
            model.name,
            OrderedDict((mt.name, v) for mt, v in zip(self.rating_metrics, values)),
        )

    def evaluate(self, model, metrics, show_validation=True, save_dir=None, fold=None):
        """Fit `model` on the training matrix and score it on the test matrix.

        Parameters
        ----------
        model: :obj:`librec.models.Recommender`
            Model to train and evaluate.

        metrics: list
            Rating metrics; other objects are ignored.

        show_validation: bool, optional, default: True
            Also score the validation matrix when there is one.

        save_dir: str, optional, default: None
            If given, the trained model is saved there.

        fold: int, optional, default: None
            Fold number, used for logging and saving.

        Returns
        -------
        res: (:obj:`librec.experiment.Result`, :obj:`librec.experiment.Result`)
            Test result and validation result (None without validation set).
        """
        if self.train_set is None or self.test_set is None:
            raise ValueError("{} has no train/test split".format(type(self).__name__))

        self.rng = get_rng(self.seed)
        self._organize_metrics(metrics)
        tag = model.name if fold is None else "{} fold [{}]".format(model.name, fold)

        if self.verbose:
            log.info("[%s] Training started!", tag)
        start = time.time()
        model.fit(self.train_set, self.val_set)
        train_time = (time.time() - start) * 1000

        if self.verbose:
            log.info("[%s] Evaluation started!", tag)
        start = time.time()
        test_result = self._eval(model, self.test_set)
        test_result.metric_avg_results[TRAIN_TIME] = train_time
        test_result.metric_avg_results[TEST_TIME] = (time.time() - start) * 1000

        val_result = None
        if show_validation and self.val_set is not None:
            start = time.time()
            val_result = self._eval(model, self.val_set)
            val_result.metric_avg_results[TEST_TIME] = (time.time() - start) * 1000

        if save_dir is not None:
            model.save(save_dir, test_set=self.test_set, fold=fold)

        return test_result, val_result

    @classmethod
    def from_splits(cls, train_data, test_data, val_data=None, seed=None, verbose=False, **kwargs):
        """Evaluation method over given matrices.

        Parameters
        ----------
        train_data, test_data: :obj:`librec.data.SparseMatrix`
            Training and test ratings, sharing one index space.

        val_data: :obj:`librec.data.SparseMatrix`, optional, default: None
            Validation ratings.

        seed: int, optional, default: None

        verbose: bool, default: False

        Returns
        -------
        method: :obj:`<librec.eval_methods.BaseMethod>`
        """
        method = cls(seed=seed, verbose=verbose, **kwargs)
        return method.build(train_data=train_data, test_data=test_data, val_data=val_data)
