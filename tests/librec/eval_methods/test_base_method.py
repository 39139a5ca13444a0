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

from librec.config import HyperParams
from librec.data import DataDAO
from librec.data import DataSplitter
from librec.data import SparseMatrix
from librec.eval_methods import BaseMethod
from librec.eval_methods import MetricAccumulator
from librec.eval_methods import rating_eval
from librec.metrics import MAE
from librec.metrics import RMSE
from librec.models import RegSVD


class TestBaseMethod(unittest.TestCase):
    def setUp(self):
        self.data = DataDAO("./tests/data.txt").read_data()
        self.splits = DataSplitter(self.data, seed=123).get_ratio(0.6, 0.2)

    def test_init(self):
        bm = BaseMethod(self.data, seed=123)
        self.assertIsNone(bm.train_set)
        self.assertEqual(bm.seed, 123)

    def test_build(self):
        train_set, val_set, test_set = self.splits
        bm = BaseMethod.from_splits(train_set, test_set, val_set)
        self.assertIs(bm.train_set, train_set)
        self.assertIs(bm.val_set, val_set)

        empty = SparseMatrix(8, 9, {})
        with self.assertRaises(ValueError):
            BaseMethod.from_splits(empty, test_set)
        with self.assertRaises(ValueError):
            BaseMethod.from_splits(train_set, empty)
        with self.assertRaises(ValueError):
            BaseMethod.from_splits(train_set, None)

    def test_evaluate(self):
        train_set, val_set, test_set = self.splits
        model = RegSVD(params=HyperParams(max_iter=10), seed=123)

        with self.assertRaises(ValueError):
            BaseMethod(self.data).evaluate(model, [MAE()])

        bm = BaseMethod.from_splits(train_set, test_set, val_set, seed=123)
        with self.assertRaises(ValueError):
            bm.evaluate(model, MAE())

        test_result, val_result = bm.evaluate(model, [RMSE(), MAE()])
        self.assertListEqual(
            list(test_result.metric_avg_results.keys()), ["MAE", "RMSE", "Train (ms)", "Test (ms)"]
        )
        self.assertEqual(test_result.model_name, "RegSVD")
        self.assertListEqual(list(val_result.metric_avg_results.keys()), ["MAE", "RMSE", "Test (ms)"])
        self.assertIn("RegSVD", str(test_result))

        _, val_result = bm.evaluate(model.clone(), [MAE()], show_validation=False)
        self.assertIsNone(val_result)

    def test_evaluate_save(self):
        train_set, _, test_set = self.splits
        bm = BaseMethod.from_splits(train_set, test_set)
        with tempfile.TemporaryDirectory() as save_dir:
            bm.evaluate(RegSVD(params=HyperParams(max_iter=5)), [MAE()], save_dir=save_dir)
            self.assertTrue(os.path.exists(os.path.join(save_dir, "RegSVD", "model.json")))
            self.assertTrue(os.path.exists(os.path.join(save_dir, "RegSVD", "testMatrix.npz")))

    def test_rating_eval(self):
        train_set, _, test_set = self.splits
        model = RegSVD(params=HyperParams(max_iter=5), seed=123).fit(train_set)

        self.assertListEqual(rating_eval(model, [], test_set), [])

        mae, rmse = rating_eval(model, [MAE(), RMSE()], test_set)
        self.assertGreater(mae, 0.0)
        self.assertGreaterEqual(rmse, mae)


class TestMetricAccumulator(unittest.TestCase):
    def test_key_order(self):
        acc = MetricAccumulator()
        acc.add(2, {"MAE": 3.0, "RMSE": 4.0})
        acc.add(0, {"MAE": 1.0, "RMSE": 2.0})
        acc.add(1, {"MAE": 2.0, "RMSE": 3.0})

        self.assertEqual(len(acc), 3)
        self.assertListEqual([k for k, _ in acc.items()], [0, 1, 2])
        self.assertDictEqual(dict(acc.sums()), {"MAE": 6.0, "RMSE": 9.0})
        self.assertDictEqual(dict(acc.average()), {"MAE": 2.0, "RMSE": 3.0})
        self.assertDictEqual(dict(acc.average(size=6)), {"MAE": 1.0, "RMSE": 1.5})

    def test_replace(self):
        acc = MetricAccumulator()
        acc.add(0, {"MAE": 1.0})
        acc.add(0, {"MAE": 5.0})
        self.assertEqual(len(acc), 1)
        self.assertEqual(acc.sums()["MAE"], 5.0)


if __name__ == '__main__':
    unittest.main()
