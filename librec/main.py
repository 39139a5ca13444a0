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
"""
Run a recommender with the settings of a configuration file.

Usage:
    librec [options]
    librec [options] --dataset-spec
    librec [options] --dataset-split TRAIN [VAL] [--by-user-date | --by-item-date | --by-rating-date]

Options:
    -c PATH, --config=PATH
        Read settings from PATH [default: librec.conf].
    -v
        Print the version and exit.
    --version
        Print the version with the license notice and exit.
    --dataset-spec
        Log statistics of the rating (and social) data sets and exit.
    --dataset-split
        Split the ratings by ratio into split/training.txt, [split/validation.txt,]
        split/test.txt beside the rating file and exit.
    --by-user-date
        Chronological split per user.
    --by-item-date
        Chronological split per item.
    --by-rating-date
        Chronological split over all ratings.
    -h, --help
        Show this screen.
"""
import logging
import os

from docopt import docopt

from . import __version__
from .config import FileConfig
from .config import HyperParams
from .data import DataDAO
from .data import DataSplitter
from .eval_methods import BaseMethod
from .eval_methods import CrossValidation
from .eval_methods import GivenN
from .eval_methods import LeaveOneOut
from .eval_methods import RatioSplit
from .exception import ConfigError
from .exception import DataFormatError
from .exception import DivergenceError
from .experiment import Experiment
from .metrics import MAE
from .metrics import MPE
from .metrics import MSE
from .metrics import RMSE
from .models import get_model_class

_log = logging.getLogger(__name__)

NOTICE = """
LibRec version {}

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this software except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
"""

DEFAULT_RATINGS_SETUP = "-columns 0 1 2 -threshold -1"

BY_DATE_FLAGS = (
    ("--by-user-date", "user"),
    ("--by-item-date", "item"),
    ("--by-rating-date", "rating"),
)


def rating_setup(conf):
    """Column positions and binarization threshold from ``ratings.setup``."""
    opts = conf.get_param_options("ratings.setup", DEFAULT_RATINGS_SETUP)
    cols = opts.get_options("-columns") or ["0", "1", "2"]
    try:
        columns = tuple(int(c) for c in cols)
    except ValueError:
        raise ConfigError("Invalid ratings.setup columns: {}".format(" ".join(cols)))
    if len(columns) not in (3, 4):
        raise ConfigError("ratings.setup needs 3 or 4 columns but {}".format(len(columns)))
    threshold = opts.get_float("-threshold", -1.0)
    return columns, threshold


def load_ratings(conf):
    columns, threshold = rating_setup(conf)
    dao = DataDAO(conf.get_string("dataset.ratings"))
    dao.read_data(columns=columns, threshold=threshold)
    return dao, columns, threshold


def get_seed(conf):
    return conf.get_int("random.seed") if conf.contains("random.seed") else None


def by_date_option(is_set):
    for flag, by_date in BY_DATE_FLAGS:
        if is_set(flag):
            return by_date
    return None


def dataset_spec(conf):
    dao = DataDAO(conf.get_string("dataset.ratings"))
    dao.print_specs()

    social = conf.get_string("dataset.social", "-1")
    if social != "-1":
        social_dao = DataDAO(social, user_ids=dao.user_ids, item_ids=dao.user_ids)
        social_dao.print_specs()


def dataset_split(conf, opts):
    try:
        train_ratio = float(opts["TRAIN"])
        val_ratio = float(opts["VAL"]) if opts["VAL"] is not None else None
    except ValueError:
        raise ConfigError("Split ratios must be numbers: {} {}".format(opts["TRAIN"], opts["VAL"]))

    if train_ratio <= 0 or (val_ratio or 0.0) < 0 or train_ratio + (val_ratio or 0.0) >= 1:
        raise ConfigError(
            "Wrong format! Accepted formats are either "
            "'--dataset-split ratio' or '--dataset-split trainRatio validRatio'"
        )

    dao, _, _ = load_ratings(conf)
    splitter = DataSplitter(dao.rate_matrix, seed=get_seed(conf))
    by_date = by_date_option(lambda flag: opts[flag])

    try:
        if val_ratio is not None:
            data = splitter.get_ratio(train_ratio, val_ratio)
        elif by_date == "user":
            data = splitter.get_ratio_by_user_date(train_ratio, dao.timestamps)
        elif by_date == "item":
            data = splitter.get_ratio_by_item_date(train_ratio, dao.timestamps)
        elif by_date == "rating":
            data = splitter.get_ratio_by_rating_date(train_ratio, dao.timestamps)
        else:
            data = splitter.get_ratio(train_ratio)
    except ValueError as e:
        raise ConfigError(str(e))

    split_dir = os.path.join(os.path.dirname(os.path.abspath(dao.path)), "split")
    names = ["training.txt", "validation.txt", "test.txt"]
    if len(data) == 2:
        names.remove("validation.txt")
    paths = []
    for matrix, name in zip(data, names):
        paths.append(dao.write_matrix(matrix, os.path.join(split_dir, name)))
    _log.info("Data split written to %s", split_dir)
    return paths


def build_model(conf, seed=None, verbose=False):
    name = conf.get_string("recommender")
    try:
        model_cls = get_model_class(name)
    except ValueError as e:
        raise ConfigError(str(e))

    params = HyperParams.from_config(conf)
    params.validate()
    return model_cls(params=params, verbose=verbose, seed=seed)


def build_eval_method(conf, dao, columns, threshold, seed=None, verbose=False):
    """Evaluation plan from ``evaluation.setup``."""
    setup = conf.get_param_options("evaluation.setup")
    plan = (setup.main_param or "").lower()
    data = dao.rate_matrix
    _log.info("With Setup: %s", setup)

    try:
        if plan == "cv":
            return CrossValidation(
                data,
                n_folds=setup.get_int("-k", 5),
                parallel=setup.is_on("-p", True),
                seed=seed,
                verbose=verbose,
            )
        if plan == "leave-one-out":
            return LeaveOneOut(data, num_threads=setup.get_int("-t", 1), seed=seed, verbose=verbose)
        if plan == "test-set":
            test_dao = DataDAO(
                setup.get_string("-f"), user_ids=dao.user_ids, item_ids=dao.item_ids
            )
            test_data = test_dao.read_data(columns=columns, threshold=threshold)
            return BaseMethod.from_splits(
                train_data=data, test_data=test_data, seed=seed, verbose=verbose
            )
        if plan == "given-n":
            return GivenN(data, n=setup.get_int("-n", 20), seed=seed, verbose=verbose)
        if plan == "given-ratio":
            return GivenN(data, n=setup.get_float("-r", 0.8), seed=seed, verbose=verbose)
        if plan == "train-ratio":
            return RatioSplit(
                data,
                train_ratio=setup.get_float("-r", 0.8),
                by_date=by_date_option(setup.contains),
                timestamps=dao.timestamps,
                seed=seed,
                verbose=verbose,
            )
    except (ConfigError, DataFormatError):
        raise
    except ValueError as e:
        raise ConfigError("Invalid evaluation.setup {!r}: {}".format(str(setup), e))

    raise ConfigError("Unknown evaluation plan: {!r}".format(setup.main_param))


def run(conf, verbose=False):
    seed = get_seed(conf)
    dao, columns, threshold = load_ratings(conf)
    model = build_model(conf, seed=seed, verbose=verbose)
    eval_method = build_eval_method(conf, dao, columns, threshold, seed=seed, verbose=verbose)
    metrics = [MAE(), RMSE(), MPE(quantum=dao.scale.quantum), MSE()]

    output = conf.get_param_options("output.setup", "-dir results")
    experiment = Experiment(
        eval_method=eval_method,
        models=[model],
        metrics=metrics,
        verbose=verbose,
        save_dir=output.get_string("-dir", "results"),
        save_models=output.contains("-save-model"),
    )
    return experiment.run()


def main(argv=None):
    opts = docopt(__doc__, argv=argv)

    if opts["-v"] or opts["--version"]:
        print(NOTICE.format(__version__) if opts["--version"] else "LibRec version " + __version__)
        return 0

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s", level=logging.INFO)

    try:
        conf = FileConfig(opts["--config"])
        verbose = conf.is_on("verbose", False)
        if verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        if opts["--dataset-spec"]:
            dataset_spec(conf)
        elif opts["--dataset-split"]:
            dataset_split(conf, opts)
        else:
            run(conf, verbose=verbose)
    except DivergenceError as e:
        _log.error("%s", e)
        return -1
    except (ConfigError, DataFormatError, OSError) as e:
        _log.error("%s", e)
        return 1

    return 0
