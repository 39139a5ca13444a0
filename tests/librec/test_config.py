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
import shutil
import tempfile
import unittest

from librec.config import FileConfig
from librec.config import HyperParams
from librec.config import LineConfig
from librec.exception import ConfigError


class TestLineConfig(unittest.TestCase):
    def test_parse(self):
        conf = LineConfig("cv -k 5 -p")
        self.assertEqual(conf.main_param, "cv")
        self.assertEqual(conf.get_int("-k"), 5)
        self.assertTrue(conf.contains("-p"))
        self.assertTrue(conf.is_on("-p"))
        self.assertIsNone(conf.get_string("-p"))
        self.assertEqual(str(conf), "cv -k 5 -p")

    def test_negative_numbers(self):
        conf = LineConfig("0.01 -max -1 -bold-driver")
        self.assertEqual(conf.main_param, "0.01")
        self.assertEqual(conf.get_float("-max"), -1.0)
        self.assertListEqual(conf.get_options("-bold-driver"), [])

    def test_multiple_values(self):
        conf = LineConfig("-columns 0 1 2 3 -threshold -1")
        self.assertIsNone(conf.main_param)
        self.assertListEqual(conf.get_options("-columns"), ["0", "1", "2", "3"])
        self.assertEqual(conf.get_float("-threshold"), -1.0)
        self.assertIsNone(conf.get_options("-missing"))

    def test_switches(self):
        conf = LineConfig(["cv", "-p", "off", "-q", "on", "-r", "maybe"])
        self.assertFalse(conf.is_on("-p", True))
        self.assertTrue(conf.is_on("-q"))
        self.assertTrue(conf.is_on("-s", True))
        self.assertFalse(conf.is_on("-s"))
        with self.assertRaises(ConfigError):
            conf.is_on("-r")

    def test_defaults_and_errors(self):
        conf = LineConfig("given-n -n abc")
        self.assertEqual(conf.get_int("-k", 5), 5)
        self.assertEqual(conf.get_string("-f", "x.txt"), "x.txt")
        with self.assertRaises(ConfigError):
            conf.get_int("-n")
        with self.assertRaises(ConfigError):
            LineConfig("cv extra -k 5")


class TestFileConfig(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmp_dir, "librec.conf")
        with open(self.path, "w") as f:
            f.write(
                "# comment\n"
                "dataset.ratings=./tests/data.txt\n"
                "\n"
                "num.factors = 5\n"
                "learn.rate=0.02 -max 0.05 -bold-driver\n"
                "reg.lambda=0.1 -u 0.2 -b 0.3\n"
                "evaluation.setup=cv -k 5 -p on\n"
                "verbose=on\n"
                "init.std=abc\n"
            )

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_read(self):
        conf = FileConfig(self.path)
        self.assertTrue(conf.contains("dataset.ratings"))
        self.assertEqual(conf.get_string("dataset.ratings"), "./tests/data.txt")
        self.assertEqual(conf.get_int("num.factors"), 5)
        self.assertEqual(conf.get_int("num.max.iter", 100), 100)
        self.assertTrue(conf.is_on("verbose"))
        self.assertFalse(conf.is_on("missing.switch"))

        setup = conf.get_param_options("evaluation.setup")
        self.assertEqual(setup.main_param, "cv")
        self.assertTrue(setup.is_on("-p"))

    def test_errors(self):
        conf = FileConfig(self.path)
        with self.assertRaises(ConfigError):
            conf.get_string("recommender")
        with self.assertRaises(ConfigError):
            conf.get_float("init.std")

        with open(self.path, "a") as f:
            f.write("no separator here\n")
        with self.assertRaises(ConfigError):
            FileConfig(self.path)

    def test_override(self):
        conf = FileConfig(self.path, params={"num.factors": 8, "recommender": "regsvd"})
        self.assertEqual(conf.get_int("num.factors"), 8)
        self.assertEqual(conf.get_string("recommender"), "regsvd")

        conf = FileConfig(params={"verbose": "off"})
        self.assertFalse(conf.is_on("verbose", True))


class TestHyperParams(unittest.TestCase):
    def test_defaults(self):
        params = HyperParams()
        self.assertEqual(params.num_factors, 10)
        self.assertEqual(params.max_iter, 100)
        self.assertIsNone(params.max_learn_rate)
        self.assertIsNone(params.decay)
        self.assertFalse(params.bold_driver)
        self.assertEqual(params.init, "gaussian")
        self.assertEqual(params, HyperParams(**params.to_dict()))
        self.assertIn("num_factors=10", repr(params))

    def test_validate(self):
        for kwargs in [
            dict(num_factors=0),
            dict(max_iter=0),
            dict(max_learn_rate=0.0),
            dict(decay=1.0),
            dict(reg_u=-0.1),
            dict(init="xavier"),
            dict(init_std=-1.0),
        ]:
            with self.assertRaises(ConfigError):
                HyperParams(**kwargs)

        HyperParams(decay=0.0)

    def test_from_config(self):
        conf = FileConfig(
            params={
                "num.factors": 5,
                "num.max.iter": 20,
                "learn.rate": "0.02 -max 0.05 -bold-driver -decay 0.9",
                "reg.lambda": "0.1 -u 0.2 -b 0.3",
                "init.std": 0.01,
            }
        )
        params = HyperParams.from_config(conf)
        self.assertEqual(params.num_factors, 5)
        self.assertEqual(params.max_iter, 20)
        self.assertEqual(params.learn_rate, 0.02)
        self.assertEqual(params.max_learn_rate, 0.05)
        self.assertTrue(params.bold_driver)
        self.assertEqual(params.decay, 0.9)
        self.assertEqual(params.reg_u, 0.2)
        self.assertEqual(params.reg_i, 0.1)
        self.assertEqual(params.reg_b, 0.3)
        self.assertEqual(params.init_std, 0.01)

    def test_from_config_defaults(self):
        params = HyperParams.from_config(FileConfig(params={"learn.rate": "0.01 -max -1"}))
        self.assertIsNone(params.max_learn_rate)
        self.assertIsNone(params.decay)
        self.assertFalse(params.bold_driver)
        self.assertEqual(params, HyperParams())

        with self.assertRaises(ConfigError):
            HyperParams.from_config(FileConfig(params={"learn.rate": "fast"}))


if __name__ == '__main__':
    unittest.main()
