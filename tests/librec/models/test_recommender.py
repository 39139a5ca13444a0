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

import os
import tempfile
import unittest

import numpy as np
import numpy.testing as npt

from librec.config import HyperParams
from librec.data import DataDAO
from librec.data import DataSplitter
from librec.models import BiasedMF
from librec.models import Recommender
from librec.models import RegSVD
from librec.models import get_model_class


class TestRecommender(unittest.TestCase):
    def setUp(self):
        self.data = DataDAO("./tests/data.txt").read_data()

    def test_knows_x(self):
        mf = RegSVD(params=HyperParams(max_iter=5), seed=123)
        mf.fit(self.data)

        self.assertTrue(mf.knows_user(7))
        self.assertFalse(mf.knows_user(8))
        self.assertFalse(mf.knows_user(-1))
        self.assertFalse(mf.knows_user(None))
        self.assertTrue(mf.knows_item(8))
        self.assertFalse(mf.knows_item(9))

    def test_rate(self):
        mf = RegSVD(params=HyperParams(max_iter=5), seed=123)
        mf.fit(self.data)

        # unknown pairs fall back to the global mean
        self.assertAlmostEqual(mf.rate(100, 0), 3.35)
        self.assertAlmostEqual(mf.rate(0, 100), 3.35)

        for u, i in [(0, 0), (3, 5), (7, 8)]:
            rating = mf.rate(u, i)
            self.assertGreaterEqual(rating, 1.0)
            self.assertLessEqual(rating, 5.0)

        mf.u_factors[:] = 10.0
        mf.i_factors[:] = 10.0
        self.assertEqual(mf.rate(0, 0), 5.0)
        self.assertGreater(mf.rate(0, 0, clipping=False), 5.0)

    def test_score_not_implemented(self):
        model = Recommender("base")
        with self.assertRaises(NotImplementedError):
            model.score(0, 0)

    def test_clone(self):
        params = HyperParams(num_factors=4, max_iter=5)
        mf = BiasedMF(params=params, seed=123).fit(self.data)

        clone = mf.clone()
        self.assertIsInstance(clone, BiasedMF)
        self.assertFalse(clone.is_fitted)
        self.assertIsNone(clone.u_factors)
        self.assertEqual(clone.params, params)
        self.assertIsNot(clone.params, params)
        self.assertEqual(clone.seed, 123)

        clone = mf.clone({"seed": 7, "name": "other"})
        self.assertEqual(clone.seed, 7)
        self.assertEqual(clone.name, "other")

    def test_fit_twice_warns(self):
        mf = RegSVD(params=HyperParams(max_iter=2))
        mf.fit(self.data)
        with self.assertWarns(UserWarning):
            mf.fit(self.data)

    def test_save_load(self):
        train_set, test_set = DataSplitter(self.data, seed=123).get_ratio(0.8)
        mf = BiasedMF(params=HyperParams(num_factors=4, max_iter=10), seed=123)
        mf.fit(train_set)

        with tempfile.TemporaryDirectory() as save_dir:
            model_dir = mf.save(save_dir, test_set=test_set, fold=2)
            self.assertEqual(model_dir, os.path.join(save_dir, "BiasedMF", "fold-2"))
            for name in [
                "trainMatrix.npz",
                "testMatrix.npz",
                "userFactors.npy",
                "itemFactors.npy",
                "userBiases.npy",
                "itemBiases.npy",
                "model.json",
            ]:
                self.assertTrue(os.path.exists(os.path.join(model_dir, name)), name)

            loaded = Recommender.load(model_dir)

        self.assertIsInstance(loaded, BiasedMF)
        self.assertFalse(loaded.trainable)
        self.assertEqual(loaded.params, mf.params)
        self.assertEqual(loaded.seed, 123)
        self.assertEqual(loaded.global_mean, mf.global_mean)
        npt.assert_array_equal(loaded.u_factors, mf.u_factors)
        npt.assert_array_equal(loaded.i_biases, mf.i_biases)
        npt.assert_array_equal(loaded.train_set.to_csr().toarray(), train_set.to_csr().toarray())
        npt.assert_array_equal(loaded.test_set.to_csr().toarray(), test_set.to_csr().toarray())

        for u, i, _ in zip(*test_set.uir_tuple):
            self.assertEqual(loaded.rate(u, i), mf.rate(u, i))

    def test_save_without_dir(self):
        mf = RegSVD(params=HyperParams(max_iter=2)).fit(self.data)
        self.assertIsNone(mf.save(None))

    def test_get_model_class(self):
        self.assertIs(get_model_class("regsvd"), RegSVD)
        self.assertIs(get_model_class("BiasedMF"), BiasedMF)
        with self.assertRaises(ValueError):
            get_model_class("pmf")


if __name__ == '__main__':
    unittest.main()
