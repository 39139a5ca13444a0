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

from ..iterative import IterativeRecommender


class RegSVD(IterativeRecommender):
    """Regularized SVD.

    The rating of user u for item i is predicted as the dot product of
    their latent factors, learned by SGD with L2 regularization.

    Parameters
    ----------
    name: string, optional, default: 'RegSVD'
        The name of the recommender model.

    params: :obj:`librec.config.HyperParams`, optional, default: None
        Number of factors, learning rate schedule, regularization and
        initialization settings.

    trainable: boolean, optional, default: True
        When False, the model will not be re-trained, and input of pre-trained parameters are required.

    verbose: boolean, optional, default: False
        When True, running logs are displayed.

    seed: int, optional, default: None
        Random seed for weight initialization.

    References
    ----------
    * Paterek, A. Improving regularized singular value decomposition for collaborative filtering. \
    In Proceedings of KDD Cup and Workshop, 2007.
    """

    def __init__(self, name="RegSVD", params=None, trainable=True, verbose=False, seed=None):
        super().__init__(
            name=name, params=params, trainable=trainable, verbose=verbose, seed=seed
        )

    def predict(self, user_idx, item_idx):
        return self.i_factors[item_idx].dot(self.u_factors[user_idx])

    def update_on_example(self, user_idx, item_idx, rating, learn_rate):
        reg_u, reg_i = self.params.reg_u, self.params.reg_i
        pu = self.u_factors[user_idx].copy()
        qi = self.i_factors[item_idx].copy()

        err = rating - qi.dot(pu)

        self.u_factors[user_idx] += learn_rate * (err * qi - reg_u * pu)
        self.i_factors[item_idx] += learn_rate * (err * pu - reg_i * qi)

        sq_err = err * err
        return sq_err, sq_err + reg_u * pu.dot(pu) + reg_i * qi.dot(qi)
