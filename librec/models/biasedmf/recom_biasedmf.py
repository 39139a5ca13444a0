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

from ..iterative import IterativeRecommender
from ...exception import ScoreException
from ...utils.init_utils import zeros


class BiasedMF(IterativeRecommender):
    """Biased Matrix Factorization.

    Parameters
    ----------
    name: string, optional, default: 'BiasedMF'
        The name of the recommender model.

    params: :obj:`librec.config.HyperParams`, optional, default: None
        Number of factors, learning rate schedule, regularization and
        initialization settings. User and item biases are regularized
        with `reg_u` and `reg_i`.

    trainable: boolean, optional, default: True
        When False, the model will not be re-trained, and input of pre-trained parameters are required.

    verbose: boolean, optional, default: False
        When True, running logs are displayed.

    seed: int, optional, default: None
        Random seed for weight initialization.

    References
    ----------
    * Koren, Y., Bell, R., & Volinsky, C. Matrix factorization techniques for recommender systems. \
    In Computer, (8), 30-37. 2009.
    """

    def __init__(self, name="BiasedMF", params=None, trainable=True, verbose=False, seed=None):
        super().__init__(
            name=name, params=params, trainable=trainable, verbose=verbose, seed=seed
        )
        self.u_biases = None
        self.i_biases = None

    def init_model(self, train_set):
        super().init_model(train_set)
        self.u_biases = zeros(self.num_users)
        self.i_biases = zeros(self.num_items)

    def predict(self, user_idx, item_idx):
        return (
            self.global_mean
            + self.u_biases[user_idx]
            + self.i_biases[item_idx]
            + self.i_factors[item_idx].dot(self.u_factors[user_idx])
        )

    def update_on_example(self, user_idx, item_idx, rating, learn_rate):
        reg_u, reg_i = self.params.reg_u, self.params.reg_i
        err = rating - self.predict(user_idx, item_idx)
        sq_err = err * err
        loss = sq_err

        bu = self.u_biases[user_idx]
        self.u_biases[user_idx] += learn_rate * (err - reg_u * bu)
        loss += reg_u * bu * bu

        bi = self.i_biases[item_idx]
        self.i_biases[item_idx] += learn_rate * (err - reg_i * bi)
        loss += reg_i * bi * bi

        pu = self.u_factors[user_idx].copy()
        qi = self.i_factors[item_idx].copy()
        self.u_factors[user_idx] += learn_rate * (err * qi - reg_u * pu)
        self.i_factors[item_idx] += learn_rate * (err * pu - reg_i * qi)
        loss += reg_u * pu.dot(pu) + reg_i * qi.dot(qi)

        return sq_err, loss

    def score(self, user_idx, item_idx=None):
        """Predict the scores/ratings of a user for an item.

        Unknown users get the global mean plus the item bias.

        Parameters
        ----------
        user_idx: int, required
            The index of the user for whom to perform score prediction.

        item_idx: int, optional, default: None
            The index of the item for which to perform score prediction.
            If None, scores for all known items will be returned.

        Returns
        -------
        res : A scalar or a Numpy array
            Relative scores that the user gives to the item or to all known items
        """
        if item_idx is not None and self.is_unknown_item(item_idx):
            raise ScoreException("Can't make score prediction for item %d" % item_idx)

        if item_idx is None:
            item_idx = np.arange(self.num_items)

        if self.knows_user(user_idx):
            return self.predict(user_idx, item_idx)
        return self.global_mean + self.i_biases[item_idx]

    def get_params(self):
        params = super().get_params()
        params["userBiases"] = self.u_biases
        params["itemBiases"] = self.i_biases
        return params

    def set_params(self, params):
        super().set_params(params)
        self.u_biases = params["userBiases"]
        self.i_biases = params["itemBiases"]
