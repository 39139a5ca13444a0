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

import glob
import os
import tempfile
import unittest

from librec.config import HyperParams
from librec.data import DataDAO
from librec.eval_methods import CrossValidation
from librec.eval_methods import RatioSplit
from librec.experiment import CVExperimentResult
from librec.experiment import Experiment
from librec.experiment import ExperimentResult
from librec.metrics import MAE
from librec.metrics import RMSE
from librec.models import BiasedMF
from librec.models import RegSVD


class TestExperiment(unittest.TestCase):
    def setUp(self):
        self.data = DataDAO("./tests/data.txt").read_data()
        self.params = HyperParams(num_factors=3, max_iter=10)

    def test_with_ratio_split(self):
        with tempfile.TemporaryDirectory() as save_dir:
            exp = Experiment(
                eval_method=RatioSplit(self.data, train_ratio=0.6, val_ratio=0.2, seed=123),
                models=[RegSVD(params=self.params, seed=123), BiasedMF(params=self.params, seed=123)],
                metrics=[MAE(), RMSE()],
                save_dir=save_dir,
            )
            result = exp.run()

            self.assertIsInstance(result, ExperimentResult)
            self.assertEqual(len(result), 2)
            self.assertEqual(len(exp.val_result), 2)
            self.assertListEqual([r.model_name for r in result], ["RegSVD", "BiasedMF"])

            self.assertTrue(os.path.basename(exp.output_file).startswith("LibRecExp-"))
            with open(exp.output_file) as f:
                output = f.read()
            self.assertIn("VALIDATION", output)
            self.assertIn("BiasedMF", output)
            self.assertTrue(os.path.exists(os.path.join(save_dir, "RegSVD", "model.json")))

    def test_with_cross_validation(self):
        with tempfile.TemporaryDirectory() as save_dir:
            exp = Experiment(
                eval_method=CrossValidation(self.data, n_folds=4, seed=123),
                models=[RegSVD(params=self.params, seed=123)],
                metrics=[MAE(), RMSE()],
                save_dir=save_dir,
                save_models=False,
            )
            result = exp.run()

            self.assertIsInstance(result, CVExperimentResult)
            self.assertEqual(len(result[0]), 4)
            self.assertIsNone(exp.val_result)
            self.assertFalse(os.path.exists(os.path.join(save_dir, "RegSVD")))
            self.assertEqual(len(glob.glob(os.path.join(save_dir, "LibRecExp-*.log"))), 1)

    def test_invalid(self):
        with self.assertRaises(ValueError):
            Experiment(None, None, None)
        with self.assertRaises(ValueError):
            Experiment(None, [RegSVD()], None)

        exp = Experiment(None, [RegSVD(), "model"], [MAE(), "metric"])
        self.assertEqual(len(exp.models), 1)
        self.assertEqual(len(exp.metrics), 1)


if __name__ == '__main__':
    unittest.main()
