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
from librec.data import DataDAO
from librec.eval_methods import RatioSplit
from librec.metrics import MAE
from librec.models import BiasedMF


class TestRatioSplit(unittest.TestCase):
    def setUp(self):
        self.dao = DataDAO("./tests/data.txt")
        self.data = self.dao.read_data(columns=(0, 1, 2, 3))
        self.timestamps = self.dao.timestamps

    def _times(self, matrix):
        return {(u, i): self.timestamps[u, i] for u, i, _ in zip(*matrix.uir_tuple)}

    def test_splits(self):
        ratio_split = RatioSplit(self.data, train_ratio=0.8, seed=123)
        self.assertEqual(ratio_split.train_set.size(), 16)
        self.assertEqual(ratio_split.test_set.size(), 4)
        self.assertIsNone(ratio_split.val_set)
        self.assertEqual(ratio_split.train_set.shape, (8, 9))
        self.assertEqual(ratio_split.test_set.shape, (8, 9))

        ratio_split = RatioSplit(self.data, train_ratio=0.6, val_ratio=0.2, seed=123)
        self.assertEqual(ratio_split.train_set.size(), 12)
        self.assertEqual(ratio_split.val_set.size(), 4)
        self.assertEqual(ratio_split.test_set.size(), 4)

    def test_seed(self):
        split1 = RatioSplit(self.data, train_ratio=0.8, seed=123)
        split2 = RatioSplit(self.data, train_ratio=0.8, seed=123)
        np.testing.assert_array_equal(
            split1.test_set.to_csr().toarray(), split2.test_set.to_csr().toarray()
        )

    def test_invalid(self):
        with self.assertRaises(ValueError):
            RatioSplit(self.data, train_ratio=1.2)
        with self.assertRaises(ValueError):
            RatioSplit(self.data, train_ratio=0.8, val_ratio=0.3)
        with self.assertRaises(ValueError):
            RatioSplit(self.data, by_date="week", timestamps=self.timestamps)
        with self.assertRaises(ValueError):
            RatioSplit(self.data, val_ratio=0.1, by_date="user", timestamps=self.timestamps)
        with self.assertRaises(ValueError):
            RatioSplit(self.data, by_date="rating")

    def test_by_rating_date(self):
        ratio_split = RatioSplit(
            self.data, train_ratio=0.8, by_date="rating", timestamps=self.timestamps
        )
        train_times = self._times(ratio_split.train_set)
        test_times = self._times(ratio_split.test_set)
        self.assertEqual(len(train_times), 16)
        self.assertLess(max(train_times.values()), min(test_times.values()))

    def test_by_user_date(self):
        ratio_split = RatioSplit(
            self.data, train_ratio=0.5, by_date="user", timestamps=self.timestamps
        )
        self.assertEqual(ratio_split.train_set.size(), 12)
        self.assertEqual(ratio_split.test_set.size(), 8)

        train_times = self._times(ratio_split.train_set)
        test_times = self._times(ratio_split.test_set)
        for u in range(8):
            user_train = [t for (uu, _), t in train_times.items() if uu == u]
            user_test = [t for (uu, _), t in test_times.items() if uu == u]
            self.assertEqual(len(user_test), 1)
            self.assertLess(max(user_train), min(user_test))

    def test_by_item_date(self):
        ratio_split = RatioSplit(
            self.data, train_ratio=0.5, by_date="item", timestamps=self.timestamps
        )
        self.assertEqual(ratio_split.train_set.size() + ratio_split.test_set.size(), 20)

        train_times = self._times(ratio_split.train_set)
        test_times = self._times(ratio_split.test_set)
        for i in range(9):
            item_train = [t for (_, ii), t in train_times.items() if ii == i]
            item_test = [t for (_, ii), t in test_times.items() if ii == i]
            if item_train and item_test:
                self.assertLess(max(item_train), min(item_test))

    def test_evaluate(self):
        ratio_split = RatioSplit(self.data, train_ratio=0.6, val_ratio=0.2, seed=123)
        model = BiasedMF(params=HyperParams(max_iter=10), seed=123)
        test_result, val_result = ratio_split.evaluate(model, [MAE()])
        self.assertIn("MAE", test_result.metric_avg_results)
        self.assertIn("MAE", val_result.metric_avg_results)


if __name__ == '__main__':
    unittest.main()
