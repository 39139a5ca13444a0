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
from collections import OrderedDict

from librec.experiment import CVResult
from librec.experiment import ExperimentResult
from librec.experiment import Result
from librec.experiment.result import format_table


class TestResult(unittest.TestCase):
    def test_format_table(self):
        table = format_table(["MAE", "RMSE"], [("RegSVD", [0.5, 0.75]), ("BiasedMF", [1, 2])])
        lines = table.splitlines()

        self.assertEqual(len(lines), 4)
        self.assertEqual(lines[0], "         |    MAE |   RMSE")
        self.assertEqual(lines[1], "---------+--------+-------")
        self.assertEqual(lines[2], "RegSVD   | 0.5000 | 0.7500")
        self.assertEqual(lines[3], "BiasedMF | 1.0000 | 2.0000")

    def test_cv_result(self):
        cv_result = CVResult("RegSVD")
        cv_result.add(1, Result("RegSVD", OrderedDict([("MAE", 1.0), ("RMSE", 2.0)])))
        cv_result.add(3, Result("RegSVD", OrderedDict([("MAE", 3.0), ("RMSE", 2.0)])))
        cv_result.failed_folds.append(2)
        cv_result.organize()

        self.assertEqual(cv_result.metric_mean["MAE"], 2.0)
        self.assertEqual(cv_result.metric_std["MAE"], 1.0)
        self.assertEqual(cv_result.metric_std["RMSE"], 0.0)

        output = str(cv_result)
        self.assertTrue(output.startswith("[RegSVD]"))
        self.assertIn("Fold 3", output)
        self.assertIn("Mean", output)
        self.assertIn("failed folds: 2", output)

    def test_empty_cv_result(self):
        cv_result = CVResult("RegSVD")
        cv_result.organize()
        self.assertEqual(len(cv_result.metric_mean), 0)
        self.assertEqual(str(cv_result), "[RegSVD]\n")

    def test_experiment_result(self):
        result = ExperimentResult()
        result.append(Result("RegSVD", OrderedDict([("MAE", 0.5)])))
        result.append(Result("BiasedMF", OrderedDict([("MAE", 0.25)])))
        output = str(result)
        self.assertIn("RegSVD", output)
        self.assertIn("0.2500", output)


if __name__ == '__main__':
    unittest.main()
