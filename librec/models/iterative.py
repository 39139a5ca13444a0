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

import numpy as np
from tqdm.auto import trange

from ..config import HyperParams
from ..exception import DivergenceError
from ..exception import ScoreException
from ..utils import get_rng
from ..utils.init_utils import normal, uniform
from .recommender import Recommender

log = logging.getLogger(__name__)

CONVERGENCE_TOL = 1e-5


class TrainingState:
    """Mutable state of one SGD run.

    Attributes
    ----------
    learn_rate: float
        Current learning rate.

    errs, loss: float
        Halved sums of squared errors and of the objective over the last epoch.

    last_errs, last_loss: float
        Values of the last accepted epoch.

    last_factors: tuple
        Snapshot of the factor matrices restored by the bold driver.

    loss_history, errs_history, learn_rate_history: list
        One value per epoch run.
    """

    def __init__(self, learn_rate):
        self.init_learn_rate = learn_rate
        self.learn_rate = learn_rate
        self.errs = 0.0
        self.loss = 0.0
        self.last_errs = 0.0
        self.last_loss = 0.0
        self.last_factors = None
        self.epoch = 0
        self.converged = False
        self.loss_history = []
        self.errs_history = []
        self.learn_rate_history = []


class SGDTrainer:
    """Epoch loop shared by the iterative recommenders.

    The trainer visits the nonzero ratings of the training matrix in
    row-major order and hands each one to ``model.update_on_example``.
    It takes care of convergence detection, divergence detection and
    learning rate adaptation.

    Parameters
    ----------
    params: :obj:`librec.config.HyperParams`, required
        Hyper-parameters of the run.

    name: str, optional, default: 'SGD'
        Name used in log messages.

    verbose: boolean, optional, default: False
        When True, a progress bar and per-epoch debug logs are shown.
    """

    def __init__(self, params, name="SGD", verbose=False):
        self.params = params
        self.name = name
        self.verbose = verbose

    def run(self, model, train_set):
        state = TrainingState(self.params.learn_rate)
        state.last_factors = model.snapshot()

        (u_indices, i_indices, r_values) = train_set.uir_tuple
        mask = r_values > 0
        u_indices = u_indices[mask].tolist()
        i_indices = i_indices[mask].tolist()
        r_values = r_values[mask].tolist()

        progress_bar = trange(
            1, self.params.max_iter + 1, desc=self.name, disable=not self.verbose
        )
        for epoch in progress_bar:
            errs = 0.0
            loss = 0.0
            for u, i, r in zip(u_indices, i_indices, r_values):
                e2, l = model.update_on_example(u, i, r, state.learn_rate)
                errs += e2
                loss += l

            state.errs = 0.5 * errs
            state.loss = 0.5 * loss
            state.epoch = epoch
            state.errs_history.append(state.errs)
            state.loss_history.append(state.loss)
            state.learn_rate_history.append(state.learn_rate)
            progress_bar.set_postfix(loss=state.loss)

            if self.is_converged(model, state, epoch):
                state.converged = True
                break

        progress_bar.close()
        return state

    def is_converged(self, model, state, epoch):
        if self.verbose:
            log.debug(
                "%s iter %d: errs = %.6f, delta_errs = %.6f, loss = %.6f, delta_loss = %.6f%s",
                self.name,
                epoch,
                state.errs,
                state.last_errs - state.errs,
                state.loss,
                abs(state.last_loss) - abs(state.loss),
                ", learn_rate = {:.6g}".format(state.learn_rate) if state.learn_rate > 0 else "",
            )

        if not np.isfinite(state.loss):
            raise DivergenceError(self.name, epoch, state.loss)

        converged = abs(state.errs) < CONVERGENCE_TOL or (
            state.last_errs >= state.errs
            and state.last_errs - state.errs < CONVERGENCE_TOL
        )

        if not converged and self.update_learn_rate(model, state, epoch):
            state.last_loss = state.loss
            state.last_errs = state.errs

        return converged

    def update_learn_rate(self, model, state, epoch):
        """Adapt the learning rate after an epoch.

        Returns
        -------
        res: bool
            False when the bold driver discarded the epoch, in which case
            the last loss and errors must be kept.
        """
        params = self.params
        if state.learn_rate <= 0:
            return True

        accepted = True
        if params.bold_driver and epoch > 1:
            if abs(state.last_loss) > abs(state.loss):
                state.learn_rate *= 1.05
                state.last_factors = model.snapshot()
            else:
                state.learn_rate *= 0.5
                model.restore(state.last_factors)
                accepted = False
                if self.verbose:
                    log.debug(
                        "%s iter %d: undo last weight changes and sharply decrease the learning rate",
                        self.name,
                        epoch,
                    )
        elif params.decay is not None and 0 < params.decay < 1:
            state.learn_rate *= params.decay
        elif params.decay == 0:
            lr0 = state.init_learn_rate
            state.learn_rate = lr0 / (1.0 + lr0 * params.reg_u * epoch)

        if params.max_learn_rate is not None and state.learn_rate > params.max_learn_rate:
            state.learn_rate = params.max_learn_rate

        return accepted


class IterativeRecommender(Recommender):
    """Latent factor model trained by SGD over the observed ratings.

    Sub-classes implement :meth:`predict` and :meth:`update_on_example`,
    and may allocate extra parameters in :meth:`init_model`.

    Parameters
    ----------
    name: str, required
        Name of the recommender model.

    params: :obj:`librec.config.HyperParams`, optional, default: None
        Hyper-parameters. If None, the defaults of HyperParams are used.

    trainable: boolean, optional, default: True
        When False, the model will not be re-trained.

    verbose: boolean, optional, default: False
        When True, running logs are displayed.

    seed: int, optional, default: None
        Random seed for weight initialization.

    Attributes
    ----------
    u_factors: Numpy array, shape (num_users, num_factors)
        User factors P.

    i_factors: Numpy array, shape (num_items, num_factors)
        Item factors Q.

    state: :obj:`TrainingState`
        State of the last training run.
    """

    def __init__(self, name, params=None, trainable=True, verbose=False, seed=None):
        super().__init__(name=name, trainable=trainable, verbose=verbose)
        self.params = HyperParams() if params is None else params
        self.seed = seed
        self.u_factors = None
        self.i_factors = None
        self.state = None

    def _init_factors(self, shape, rng):
        if self.params.init == "gaussian":
            return normal(
                shape, mean=self.params.init_mean, std=self.params.init_std, random_state=rng
            )
        return uniform(shape, low=0.0, high=0.01, random_state=rng)

    def init_model(self, train_set):
        """Allocate the factors. Rows of users and items without training
        ratings are set to zero."""
        rng = get_rng(self.seed)
        k = self.params.num_factors

        self.u_factors = self._init_factors((self.num_users, k), rng)
        self.i_factors = self._init_factors((self.num_items, k), rng)

        (u_indices, i_indices, r_values) = train_set.uir_tuple
        user_counts = np.bincount(u_indices, minlength=self.num_users)
        item_counts = np.bincount(i_indices, minlength=self.num_items)
        self.u_factors[user_counts == 0] = 0.0
        self.i_factors[item_counts == 0] = 0.0

    def fit(self, train_set, val_set=None):
        """Fit the model to observations.

        Parameters
        ----------
        train_set: :obj:`librec.data.SparseMatrix`, required
            User-Item rating matrix.

        val_set: :obj:`librec.data.SparseMatrix`, optional, default: None
            Not used by iterative models.

        Returns
        -------
        self : object
        """
        Recommender.fit(self, train_set, val_set)

        if self.trainable:
            self.init_model(train_set)
            self.build_model()

        return self

    def build_model(self):
        trainer = SGDTrainer(self.params, name=self.name, verbose=self.verbose)
        self.state = trainer.run(self, self.train_set)
        return self.state

    def snapshot(self):
        return self.u_factors.copy(), self.i_factors.copy()

    def restore(self, snapshot):
        u_factors, i_factors = snapshot
        self.u_factors = u_factors.copy()
        self.i_factors = i_factors.copy()

    def predict(self, user_idx, item_idx):
        raise NotImplementedError()

    def update_on_example(self, user_idx, item_idx, rating, learn_rate):
        """One SGD step on a single observed rating.

        Returns
        -------
        res: tuple
            (squared error, objective term) of the observation, computed
            with the parameters before the step.
        """
        raise NotImplementedError()

    def score(self, user_idx, item_idx=None):
        """Predict the scores/ratings of a user for an item.

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
        if self.is_unknown_user(user_idx):
            raise ScoreException("Can't make score prediction for user %d" % user_idx)

        if item_idx is None:
            return self.predict(user_idx, np.arange(self.num_items))

        if self.is_unknown_item(item_idx):
            raise ScoreException("Can't make score prediction for item %d" % item_idx)

        return self.predict(user_idx, item_idx)

    def get_params(self):
        return {"userFactors": self.u_factors, "itemFactors": self.i_factors}

    def set_params(self, params):
        self.u_factors = params["userFactors"]
        self.i_factors = params["itemFactors"]
