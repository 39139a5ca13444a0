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


class RatingMetric:
    """Rating Metric: a (weighted) average of a per-rating error.

    Parameters
    ----------
    name: string, optional, default: None
        Name of the measure, used as column tag in results.

    higher_better: bool, optional, default: False
        Whether a higher value means a better model.

    Attributes
    ----------
    type: string, value: 'rating'
        Type of the metric.

    """

    def __init__(self, name=None, higher_better=False):
        self.type = 'rating'
        self.name = name
        self.higher_better = higher_better

    def errors(self, gt_ratings, pd_ratings):
        """Per-rating error, averaged by :meth:`compute`"""
        raise NotImplementedError()

    def compute(self, gt_ratings, pd_ratings, weights=None, **kwargs):
        """Compute the metric over a set of predictions.

        Parameters
        ----------
        gt_ratings: Numpy array
            Ground-truth rating values.

        pd_ratings: Numpy array
            Predicted rating values, aligned with `gt_ratings`.

        weights: Numpy array, optional, default: None
            Weights for rating values.

        **kwargs: For compatibility

        Returns
        -------
        res: A scalar.

        """
        gt_ratings = np.asarray(gt_ratings, dtype=np.float64)
        pd_ratings = np.asarray(pd_ratings, dtype=np.float64)
        return np.average(self.errors(gt_ratings, pd_ratings), axis=0, weights=weights)


class MAE(RatingMetric):
    """Mean Absolute Error."""

    def __init__(self):
        RatingMetric.__init__(self, name='MAE')

    def errors(self, gt_ratings, pd_ratings):
        return np.abs(gt_ratings - pd_ratings)


class MSE(RatingMetric):
    """Mean Squared Error."""

    def __init__(self):
        RatingMetric.__init__(self, name='MSE')

    def errors(self, gt_ratings, pd_ratings):
        return (gt_ratings - pd_ratings) ** 2


class RMSE(MSE):
    """Root Mean Squared Error."""

    def __init__(self):
        RatingMetric.__init__(self, name='RMSE')

    def compute(self, gt_ratings, pd_ratings, weights=None, **kwargs):
        return np.sqrt(MSE.compute(self, gt_ratings, pd_ratings, weights=weights))


class MPE(RatingMetric):
    """Mean Prediction Error: the fraction of predictions that miss the
    observed rating by more than `quantum`.

    Parameters
    ----------
    quantum: float, optional, default: 1e-5
        Tolerance, usually half of the smallest step of the rating scale,
        so that a prediction counts as correct when it rounds to the observed level.

    """

    def __init__(self, quantum=1e-5):
        RatingMetric.__init__(self, name='MPE')
        self.quantum = quantum

    def errors(self, gt_ratings, pd_ratings):
        return (np.abs(gt_ratings - pd_ratings) > self.quantum).astype(np.float64)
