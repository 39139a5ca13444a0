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

import unittest

import numpy as np

from librec.config import HyperParams
from librec.data import DataSplitter
from librec.data import SparseMatrix
from librec.eval_methods import BaseMethod
from librec.exception import ScoreException
from librec.metrics import RMSE
from librec.models import RegSVD


def synthetic_ratings(num_users=100, num_items=100, rank=3, density=0.25, noise=0.05, seed=123):
    """Noisy ratings drawn from a low-rank matrix with positive factors.

    Factors are uniform in [0.5, 1.5), so ratings spread over roughly [0.75, 6.75]
    with most of them between 2 and 4.
    """
    rng = np.random.RandomState(seed)
    u_factors = rng.uniform(0.5, 1.5, size=(num_users, rank))
    i_factors = rng.uniform(0.5, 1.5, size=(num_items, rank))

    size = int(density * num_users * num_items)
    cells = rng.choice(num_users * num_items, size=size, replace=False)
    rows, cols = cells // num_items, cells % num_items
    ratings = np.sum(u_factors[rows] * i_factors[cols], axis=1)
    ratings += rng.normal(0.0, noise, size=size)

    return SparseMatrix.from_entries(num_users, num_items, rows, cols, ratings)


class TestRegSVD(unittest.TestCase):
    def test_low_rank_recovery(self):
        data = synthetic_ratings()
        self.assertEqual(data.size(), 2500)
        train_set, test_set = DataSplitter(data, seed=123).get_ratio(0.8)

        # predicting the training mean everywhere
        _, _, test_ratings = test_set.uir_tuple
        baseline = RMSE().compute(test_ratings, np.full(len(test_ratings), train_set.mean()))
        self.assertGreater(baseline, 0.5)

        params = HyperParams(
            num_factors=3, max_iter=200, learn_rate=0.01, reg_u=0.02, reg_i=0.02,
            init_mean=0.0, init_std=0.1,
        )
        model = RegSVD(params=params, seed=123)
        test_result, _ = BaseMethod.from_splits(train_set, test_set).evaluate(model, [RMSE()])

        rmse = test_result.metric_avg_results["RMSE"]
        self.assertLess(rmse, 0.2)
        self.assertLess(rmse, 0.5 * baseline)

        loss = np.asarray(model.state.loss_history[-50:])
        self.assertTrue(np.all(np.diff(loss) <= 1e-9 * loss[:-1]))
        self.assertLess(model.state.loss_history[-1], 0.1 * model.state.loss_history[0])

    def test_predict(self):
        data = SparseMatrix(2, 2, {(0, 0): 4.0, (1, 1): 2.0})
        model = RegSVD(params=HyperParams(num_factors=2, max_iter=1), trainable=False)
        model.fit(data)
        model.u_factors = np.array([[1.0, 2.0], [0.5, 0.0]])
        model.i_factors = np.array([[1.0, 1.0], [2.0, 3.0]])

        self.assertEqual(model.predict(0, 1), 8.0)
        self.assertEqual(model.score(1, 0), 0.5)
        np.testing.assert_array_equal(model.score(0), [3.0, 8.0])
        self.assertEqual(model.rate(0, 1), 4.0)

        with self.assertRaises(ScoreException):
            model.score(2, 0)
        with self.assertRaises(ScoreException):
            model.score(0, 2)

    def test_update_on_example(self):
        data = SparseMatrix(1, 1, {(0, 0): 3.0})
        params = HyperParams(num_factors=1, max_iter=1, reg_u=0.5, reg_i=0.25)
        model = RegSVD(params=params, trainable=False).fit(data)
        model.u_factors = np.array([[1.0]])
        model.i_factors = np.array([[2.0]])

        sq_err, loss = model.update_on_example(0, 0, 3.0, 0.1)

        # err = 3 - 2 = 1
        self.assertEqual(sq_err, 1.0)
        self.assertAlmostEqual(loss, 1.0 + 0.5 * 1.0 + 0.25 * 4.0)
        self.assertAlmostEqual(model.u_factors[0, 0], 1.0 + 0.1 * (1.0 * 2.0 - 0.5 * 1.0))
        self.assertAlmostEqual(model.i_factors[0, 0], 2.0 + 0.1 * (1.0 * 1.0 - 0.25 * 2.0))


if __name__ == '__main__':
    unittest.main()
