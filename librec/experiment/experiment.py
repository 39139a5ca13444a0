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
from datetime import datetime

from .result import CVExperimentResult
from .result import ExperimentResult
from ..metrics.rating import RatingMetric
from ..models.recommender import Recommender

log = logging.getLogger(__name__)


class Experiment:
    """Train and evaluate a list of models under one evaluation plan.

    Parameters
    ----------
    eval_method: :obj:`<librec.eval_methods.BaseMethod>`, required
        The evaluation plan, e.g. :obj:`RatioSplit` or :obj:`CrossValidation`.

    models: list of :obj:`<librec.models.Recommender>`, required
        Models to evaluate, e.g. [RegSVD(), BiasedMF()].

    metrics: list of :obj:`<librec.metrics.RatingMetric>`, required
        Metrics reported for every model, e.g. [MAE(), RMSE()].

    show_validation: bool, optional, default: True
        Report the validation scores when the plan has a validation set.

    save_dir: str, optional, default: None
        Directory of the run log (``LibRecExp-<time>.log``) and of the
        saved models. The log goes to the working directory when None.

    save_models: bool, optional, default: True
        When False, only the log goes to `save_dir`.

    Attributes
    ----------
    result: :obj:`ExperimentResult` or :obj:`CVExperimentResult`
        Test scores of the last run, one entry per model.

    val_result: :obj:`ExperimentResult`
        Validation scores of the last run, or None.

    output_file: str
        Path of the log file written by the last run.
    """

    def __init__(self, eval_method, models, metrics, show_validation=True, verbose=False,
                 save_dir=None, save_models=True):
        self.eval_method = eval_method
        self.models = self._validate_models(models)
        self.metrics = self._validate_metrics(metrics)
        self.show_validation = show_validation
        self.verbose = verbose
        self.save_dir = save_dir
        self.save_models = save_models
        self.result = None
        self.val_result = None
        self.output_file = None

    @staticmethod
    def _validate_models(input_models):
        if not hasattr(input_models, "__len__"):
            raise ValueError("models must be a list but {}".format(type(input_models)))
        return [m for m in input_models if isinstance(m, Recommender)]

    @staticmethod
    def _validate_metrics(input_metrics):
        if not hasattr(input_metrics, "__len__"):
            raise ValueError("metrics must be a list but {}".format(type(input_metrics)))
        return [m for m in input_metrics if isinstance(m, RatingMetric)]

    def _create_result(self):
        from ..eval_methods.cross_validation import CrossValidation

        self.val_result = None
        if isinstance(self.eval_method, CrossValidation):
            self.result = CVExperimentResult()
            return

        self.result = ExperimentResult()
        if self.show_validation and self.eval_method.val_set is not None:
            self.val_result = ExperimentResult()

    def _write_log(self, output):
        log_dir = "." if self.save_dir is None else self.save_dir
        os.makedirs(log_dir, exist_ok=True)
        stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S-%f")
        self.output_file = os.path.join(log_dir, "LibRecExp-{}.log".format(stamp))
        with open(self.output_file, "w", encoding="utf-8") as f:
            f.write(output)
        log.info("Experiment log written to %s", self.output_file)

    def run(self):
        """Evaluate every model, print the result tables and write them to the log"""
        self._create_result()
        model_dir = self.save_dir if self.save_models else None

        for model in self.models:
            test_result, val_result = self.eval_method.evaluate(
                model=model,
                metrics=self.metrics,
                show_validation=self.show_validation,
                save_dir=model_dir,
            )
            self.result.append(test_result)
            if self.val_result is not None:
                self.val_result.append(val_result)

        sections = []
        if self.val_result is not None:
            sections.append("VALIDATION:\n...\n{}".format(self.val_result))
        sections.append("TEST:\n...\n{}".format(self.result))
        output = "\n" + "\n".join(sections)

        print(output)
        self._write_log(output)
        return self.result
