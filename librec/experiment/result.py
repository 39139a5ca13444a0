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

from collections import OrderedDict

import numpy as np

NUM_FMT = "{:.4f}"


def format_table(headers, rows, rule_before=(0,)):
    """Render labelled rows of metric values as a text table.

    Parameters
    ----------
    headers: list of str
        Metric names, one per column.

    rows: list of (str, list) pairs
        Row label and the values of the row, in `headers` order.

    rule_before: tuple of int, optional, default: (0,)
        Indices of the rows preceded by a horizontal rule.
    """
    cells = [[label] + [NUM_FMT.format(v) for v in values] for label, values in rows]
    header = [""] + list(headers)
    widths = [max(len(c) for c in column) for column in zip(header, *cells)]

    def render(row, sep=" | "):
        label = row[0].ljust(widths[0])
        return sep.join([label] + [c.rjust(w) for c, w in zip(row[1:], widths[1:])])

    lines = [render(header)]
    for idx, row in enumerate(cells):
        if idx in rule_before:
            lines.append(render(["-" * w for w in widths], sep="-+-"))
        lines.append(render(row))
    return "\n".join(lines) + "\n"


class Result:
    """
    Result Class for a single model

    Parameters
    ----------
    model_name: string, required
        The name of the recommender model.

    metric_avg_results: :obj:`OrderedDict`, required
        A dictionary containing the average result per-metric,
        including the timing tags "Train (ms)" and "Test (ms)".
    """

    def __init__(self, model_name, metric_avg_results):
        self.model_name = model_name
        self.metric_avg_results = metric_avg_results

    def __str__(self):
        headers = list(self.metric_avg_results.keys())
        return format_table(headers, [(self.model_name, list(self.metric_avg_results.values()))])


class CVResult(list):
    """
    Cross Validation Result Class for a single model. A list of :obj:`librec.experiment.Result`,
    one per successful fold.

    Parameters
    ----------
    model_name: string, required
        The name of the recommender model.

    Attributes
    ----------
    folds: list of int
        Fold number of each result in the list.

    failed_folds: list of int
        Folds excluded from the averages because their run failed.

    metric_mean: :obj:`OrderedDict`
        Mean over the folds per metric.

    metric_std: :obj:`OrderedDict`
        Standard deviation over the folds per metric.
    """

    def __init__(self, model_name):
        super().__init__()
        self.model_name = model_name
        self.folds = []
        self.failed_folds = []
        self.metric_mean = OrderedDict()
        self.metric_std = OrderedDict()
        self.table = ""

    def __str__(self):
        failed = ""
        if self.failed_folds:
            failed = "failed folds: {}\n".format(", ".join(str(f) for f in self.failed_folds))
        return "[{}]\n{}{}".format(self.model_name, self.table, failed)

    def add(self, fold, result):
        self.folds.append(fold)
        self.append(result)

    def organize(self):
        if len(self) == 0:
            return

        headers = list(self[0].metric_avg_results.keys())
        values = np.asarray([[r.metric_avg_results[m] for m in headers] for r in self])
        mean, std = values.mean(axis=0), values.std(axis=0)
        self.metric_mean = OrderedDict(zip(headers, mean))
        self.metric_std = OrderedDict(zip(headers, std))

        rows = [("Fold %d" % f, row) for f, row in zip(self.folds, values)]
        rows += [("Mean", mean), ("Std", std)]
        self.table = format_table(headers, rows, rule_before=(0, len(self)))


class ExperimentResult(list):
    """
    Result Class for an Experiment. A list of :obj:`librec.experiment.Result`.
    """

    def __str__(self):
        headers = list(self[0].metric_avg_results.keys())
        rows = [(r.model_name, [r.metric_avg_results[m] for m in headers]) for r in self]
        return format_table(headers, rows)


class CVExperimentResult(ExperimentResult):
    """
    Result Class for a cross-validation Experiment.
    """

    def __str__(self):
        return "\n".join(str(r) for r in self)
