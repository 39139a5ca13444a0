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

import copy
import inspect
import json
import logging
import os
import warnings

import numpy as np
import scipy.sparse as sp

from ..config import HyperParams
from ..data import SparseMatrix
from ..exception import ScoreException
from ..utils.common import clip

log = logging.getLogger(__name__)

TRAIN_MATRIX_FILE = "trainMatrix.npz"
TEST_MATRIX_FILE = "testMatrix.npz"
META_FILE = "model.json"


class Recommender:
    """Base class of the rating predictors.

    Sub-classes implement :meth:`score`; :meth:`rate` turns scores into
    ratings within the observed scale and falls back to
    :meth:`default_score` for users or items outside the training matrix.

    Parameters
    ----------
    name: str, required
        Name of the model, used in results and as save directory.

    trainable: boolean, optional, default: True
        When False, :meth:`fit` only records the training statistics and
        the parameters are expected to be loaded.

    verbose: boolean, optional, default: False
        When True, running logs are displayed.

    Attributes
    ----------
    num_users, num_items: int
        Shape of the training matrix.

    min_rating, max_rating: float
        Smallest and largest training rating, the clipping range of :meth:`rate`.

    global_mean: float
        Mean of the training ratings.
    """

    def __init__(self, name, trainable=True, verbose=False):
        self.name = name
        self.trainable = trainable
        self.verbose = verbose
        self.is_fitted = False

        self.num_users = None
        self.num_items = None
        self.min_rating = None
        self.max_rating = None
        self.global_mean = None
        self.train_set = None
        self.val_set = None

    @classmethod
    def _get_init_params(cls):
        """Sorted names of the constructor arguments"""
        signature = inspect.signature(cls.__init__)
        return sorted(name for name in signature.parameters if name != "self")

    def clone(self, new_params=None):
        """Fresh, untrained copy of the model.

        Parameters
        ----------
        new_params: dict, optional, default: None
            Constructor arguments replacing those of this model.

        Returns
        -------
        object: :obj:`librec.models.Recommender`
        """
        kwargs = {
            name: copy.deepcopy(getattr(self, name)) for name in self._get_init_params()
        }
        kwargs.update(new_params or {})
        return self.__class__(**kwargs)

    def fit(self, train_set, val_set=None):
        """Record the shape and rating statistics of the training matrix.

        Parameters
        ----------
        train_set: :obj:`librec.data.SparseMatrix`, required
            User-item rating matrix.

        val_set: :obj:`librec.data.SparseMatrix`, optional, default: None
            Held-out ratings for model selection.

        Returns
        -------
        self : object
        """
        if self.is_fitted:
            warnings.warn("{} is fitted again, previous parameters are lost".format(self.name))

        self.num_users = train_set.num_rows
        self.num_items = train_set.num_columns
        self.min_rating = train_set.min()
        self.max_rating = train_set.max()
        self.global_mean = train_set.mean()
        self.train_set = train_set
        self.val_set = val_set
        self.is_fitted = True

        return self

    def knows_user(self, user_idx):
        """True when `user_idx` is a row of the training matrix"""
        return user_idx is not None and 0 <= user_idx < self.num_users

    def knows_item(self, item_idx):
        """True when `item_idx` is a column of the training matrix"""
        return item_idx is not None and 0 <= item_idx < self.num_items

    def is_unknown_user(self, user_idx):
        return not self.knows_user(user_idx)

    def is_unknown_item(self, item_idx):
        return not self.knows_item(item_idx)

    def score(self, user_idx, item_idx=None):
        """Raw model output for a user and an item, or for all items.

        Raises
        ------
        ScoreException
            When the model has nothing to say about the pair.
        """
        raise NotImplementedError("{} does not implement score()".format(type(self).__name__))

    def default_score(self):
        """Prediction used when :meth:`score` fails"""
        return self.global_mean

    def rate(self, user_idx, item_idx, clipping=True):
        """Predicted rating of `user_idx` for `item_idx`.

        Parameters
        ----------
        user_idx: int, required
            Inner index of the user.

        item_idx: int, required
            Inner index of the item.

        clipping: bool, default: True
            Clip the prediction into [min_rating, max_rating].

        Returns
        -------
        res: float
        """
        try:
            prediction = self.score(user_idx, item_idx)
        except ScoreException:
            prediction = self.default_score()

        if clipping:
            prediction = clip(prediction, self.min_rating, self.max_rating)
        return float(prediction)

    def get_params(self):
        """Trained parameters as a dict ``file stem -> Numpy array``"""
        return {}

    def set_params(self, params):
        for k, v in params.items():
            setattr(self, k, v)

    def _init_params_meta(self):
        meta = {}
        for name in self._get_init_params():
            value = getattr(self, name)
            if isinstance(value, HyperParams):
                value = value.to_dict()
            meta[name] = value
        return meta

    def save(self, save_dir=None, test_set=None, fold=None):
        """Save a recommender model to the filesystem.

        The model goes to ``<save_dir>/<name>[/fold-<fold>]`` with the train
        (and test) matrices, one ``.npy`` file per trained parameter and a
        ``model.json`` metadata file.

        Parameters
        ----------
        save_dir: str, default: None
            Path to a directory for the model to be stored.

        test_set: :obj:`librec.data.SparseMatrix`, optional, default: None
            Test ratings to be stored together with the model.

        fold: int, optional, default: None
            Fold number, used in cross validation.

        Returns
        -------
        model_dir : str
            Path to the model directory.
        """
        if save_dir is None:
            return

        model_dir = os.path.join(save_dir, self.name)
        if fold is not None:
            model_dir = os.path.join(model_dir, "fold-{}".format(fold))
        os.makedirs(model_dir, exist_ok=True)

        if self.train_set is not None:
            sp.save_npz(os.path.join(model_dir, TRAIN_MATRIX_FILE), self.train_set.to_csr())
        if test_set is not None:
            sp.save_npz(os.path.join(model_dir, TEST_MATRIX_FILE), test_set.to_csr())

        params = self.get_params()
        for key, value in params.items():
            np.save(os.path.join(model_dir, "{}.npy".format(key)), value)

        metadata = {
            "model_classname": type(self).__name__,
            "init_params": self._init_params_meta(),
            "params": sorted(params.keys()),
            "num_users": self.num_users,
            "num_items": self.num_items,
            "min_rating": self.min_rating,
            "max_rating": self.max_rating,
            "global_mean": self.global_mean,
        }
        with open(os.path.join(model_dir, META_FILE), "w", encoding="utf-8") as f:
            json.dump(metadata, f, ensure_ascii=False, indent=4)

        if self.verbose:
            log.info("%s model is saved to %s", self.name, model_dir)

        return model_dir

    @staticmethod
    def load(model_dir, trainable=False):
        """Load a recommender model saved by :meth:`save`.

        Parameters
        ----------
        model_dir: str, required
            Path to the model directory.

        trainable: boolean, optional, default: False
            Set it to True if you would like to finetune the model.

        Returns
        -------
        self : object
        """
        from . import get_model_class

        with open(os.path.join(model_dir, META_FILE), "r", encoding="utf-8") as f:
            metadata = json.load(f)

        init_params = dict(metadata["init_params"])
        if isinstance(init_params.get("params"), dict):
            init_params["params"] = HyperParams(**init_params["params"])
        init_params["trainable"] = trainable

        model = get_model_class(metadata["model_classname"])(**init_params)
        for key in ("num_users", "num_items", "min_rating", "max_rating", "global_mean"):
            setattr(model, key, metadata[key])
        model.set_params(
            {k: np.load(os.path.join(model_dir, "{}.npy".format(k))) for k in metadata["params"]}
        )

        train_file = os.path.join(model_dir, TRAIN_MATRIX_FILE)
        if os.path.exists(train_file):
            model.train_set = SparseMatrix.from_csr(sp.load_npz(train_file))
        test_file = os.path.join(model_dir, TEST_MATRIX_FILE)
        model.test_set = (
            SparseMatrix.from_csr(sp.load_npz(test_file)) if os.path.exists(test_file) else None
        )

        model.is_fitted = True
        model.load_from = model_dir
        return model
