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
import shlex
from collections import OrderedDict

from .exception import ConfigError

log = logging.getLogger(__name__)

ON_VALUES = ("on", "true", "yes", "1")
OFF_VALUES = ("off", "false", "no", "0")


def _is_number(token):
    try:
        float(token)
    except ValueError:
        return False
    return True


def _to_number(value, cast, key):
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ConfigError("Invalid value for {}: {!r}".format(key, value))


class LineConfig:
    """Parser for a single option line such as ``cv -k 5 -p``.

    The first token (when it is not an option) is the main parameter.
    Every token starting with ``-`` that is not a number opens an option,
    and the following tokens up to the next option are its values.

    Parameters
    ----------
    line: str or list of str, required
        The option line, or already split tokens (e.g., ``sys.argv[1:]``).
    """

    def __init__(self, line):
        tokens = shlex.split(line) if isinstance(line, str) else list(line)
        self.main_param = None
        self.options = OrderedDict()

        current = None
        for token in tokens:
            if token.startswith("-") and not _is_number(token):
                current = token
                self.options.setdefault(current, [])
            elif current is None:
                if self.main_param is None:
                    self.main_param = token
                else:
                    raise ConfigError(
                        "Unexpected token {!r} in option line {!r}".format(token, line)
                    )
            else:
                self.options[current].append(token)

    def __str__(self):
        parts = [] if self.main_param is None else [self.main_param]
        for key, values in self.options.items():
            parts.append(key)
            parts.extend(values)
        return " ".join(parts)

    def contains(self, key):
        return key in self.options

    def get_options(self, key):
        """Return all values following option `key` (None if absent)."""
        return self.options.get(key)

    def get_string(self, key, default=None):
        values = self.options.get(key)
        if not values:
            return default
        return values[0]

    def get_int(self, key, default=None):
        value = self.get_string(key)
        return default if value is None else _to_number(value, int, key)

    def get_float(self, key, default=None):
        value = self.get_string(key)
        return default if value is None else _to_number(value, float, key)

    def is_on(self, key, default=False):
        """Option switch: absent gives `default`, a bare flag means on,
        otherwise the value must be one of on/off (true/false, yes/no)."""
        if key not in self.options:
            return default
        value = self.get_string(key)
        if value is None:
            return True
        if value.lower() in ON_VALUES:
            return True
        if value.lower() in OFF_VALUES:
            return False
        raise ConfigError("Invalid switch value for {}: {!r}".format(key, value))


class FileConfig:
    """Line-oriented ``key=value`` configuration file.

    Blank lines and lines starting with ``#`` are ignored.

    Parameters
    ----------
    path: str, optional, default: None
        Path to the configuration file.

    params: dict, optional, default: None
        Extra key-value pairs; they override the file content.
    """

    def __init__(self, path=None, params=None):
        self.path = path
        self.params = OrderedDict()

        if path is not None:
            with open(path, "r", encoding="utf-8") as f:
                for line_no, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line or line.startswith("#"):
                        continue
                    if "=" not in line:
                        raise ConfigError(
                            "{}:{}: expected key=value but {!r}".format(path, line_no, line)
                        )
                    key, value = line.split("=", 1)
                    self.params[key.strip()] = value.strip()

        if params is not None:
            self.params.update((k, str(v)) for k, v in params.items())

    def contains(self, key):
        return key in self.params

    def get_string(self, key, default=None):
        value = self.params.get(key)
        if value is None or value == "":
            if default is None:
                raise ConfigError("Missing required configuration key: {}".format(key))
            return default
        return value

    def get_int(self, key, default=None):
        return _to_number(self.get_string(key, default), int, key)

    def get_float(self, key, default=None):
        return _to_number(self.get_string(key, default), float, key)

    def is_on(self, key, default=False):
        value = self.params.get(key)
        if value is None or value == "":
            return default
        if value.lower() in ON_VALUES:
            return True
        if value.lower() in OFF_VALUES:
            return False
        raise ConfigError("Invalid switch value for {}: {!r}".format(key, value))

    def get_param_options(self, key, default=None):
        """Parse the value of `key` as an option line."""
        return LineConfig(self.get_string(key, default))


class HyperParams:
    """Hyper-parameters of an iterative (SGD) recommender.

    Parameters
    ----------
    num_factors: int, optional, default: 10
        The dimension of the latent factors.

    max_iter: int, optional, default: 100
        Maximum number of epochs.

    learn_rate: float, optional, default: 0.01
        Initial learning rate. A non-positive value turns off
        learning rate adaptation.

    max_learn_rate: float, optional, default: None
        Upper bound of the learning rate. None means no bound.

    bold_driver: bool, optional, default: False
        When True, the bold driver heuristic adapts the learning rate.

    decay: float, optional, default: None
        Learning rate decay. A value in (0, 1) gives exponential decay,
        0 gives inverse-time decay and None turns decay off.

    momentum: float, optional, default: 0.0
        Momentum, kept for configuration compatibility.

    reg_u: float, optional, default: 0.1
        Regularization of user factors (and user biases).

    reg_i: float, optional, default: 0.1
        Regularization of item factors (and item biases).

    reg_b: float, optional, default: 0.1
        Regularization of biases for models using a separate value.

    init: str, optional, default: 'gaussian'
        Initialization strategy of the factors: 'gaussian' or 'uniform'.

    init_mean: float, optional, default: 0.0
        Mean of the Gaussian initialization.

    init_std: float, optional, default: 0.1
        Standard deviation of the Gaussian initialization.
    """

    INIT_METHODS = ("gaussian", "uniform")

    def __init__(
        self,
        num_factors=10,
        max_iter=100,
        learn_rate=0.01,
        max_learn_rate=None,
        bold_driver=False,
        decay=None,
        momentum=0.0,
        reg_u=0.1,
        reg_i=0.1,
        reg_b=0.1,
        init="gaussian",
        init_mean=0.0,
        init_std=0.1,
    ):
        self.num_factors = num_factors
        self.max_iter = max_iter
        self.learn_rate = learn_rate
        self.max_learn_rate = max_learn_rate
        self.bold_driver = bold_driver
        self.decay = decay
        self.momentum = momentum
        self.reg_u = reg_u
        self.reg_i = reg_i
        self.reg_b = reg_b
        self.init = init
        self.init_mean = init_mean
        self.init_std = init_std
        self.validate()

    def validate(self):
        if int(self.num_factors) <= 0:
            raise ConfigError("num_factors must be positive but {}".format(self.num_factors))
        if int(self.max_iter) <= 0:
            raise ConfigError("max_iter must be positive but {}".format(self.max_iter))
        if self.max_learn_rate is not None and self.max_learn_rate <= 0:
            raise ConfigError(
                "max_learn_rate must be positive but {}".format(self.max_learn_rate)
            )
        if self.decay is not None and not 0.0 <= self.decay < 1.0:
            raise ConfigError("decay must be in [0, 1) but {}".format(self.decay))
        for name in ("reg_u", "reg_i", "reg_b"):
            if getattr(self, name) < 0:
                raise ConfigError("{} must be non-negative".format(name))
        if self.init not in self.INIT_METHODS:
            raise ConfigError(
                "init must be one of {} but {!r}".format(self.INIT_METHODS, self.init)
            )
        if self.init_std < 0:
            raise ConfigError("init_std must be non-negative but {}".format(self.init_std))
        return self

    def to_dict(self):
        return OrderedDict(
            (name, getattr(self, name))
            for name in (
                "num_factors",
                "max_iter",
                "learn_rate",
                "max_learn_rate",
                "bold_driver",
                "decay",
                "momentum",
                "reg_u",
                "reg_i",
                "reg_b",
                "init",
                "init_mean",
                "init_std",
            )
        )

    def __repr__(self):
        return "HyperParams({})".format(
            ", ".join("{}={!r}".format(k, v) for k, v in self.to_dict().items())
        )

    def __eq__(self, other):
        return isinstance(other, HyperParams) and self.to_dict() == other.to_dict()

    @classmethod
    def from_config(cls, conf):
        """Build hyper-parameters from a :obj:`FileConfig`.

        Recognized keys are ``num.factors``, ``num.max.iter``,
        ``learn.rate η [-max η_max] [-bold-driver] [-decay δ] [-momentum m]``,
        ``reg.lambda λ [-u λu] [-i λi] [-b λb]``, ``init.method``,
        ``init.mean`` and ``init.std``.
        """
        lr_opts = conf.get_param_options("learn.rate", "0.01")
        reg_opts = conf.get_param_options("reg.lambda", "0.1")

        learn_rate = _to_number(lr_opts.main_param, float, "learn.rate")
        reg = _to_number(reg_opts.main_param, float, "reg.lambda")

        max_lr = lr_opts.get_float("-max", -1.0)
        decay = lr_opts.get_float("-decay", -1.0)

        return cls(
            num_factors=conf.get_int("num.factors", 10),
            max_iter=conf.get_int("num.max.iter", 100),
            learn_rate=learn_rate,
            max_learn_rate=max_lr if max_lr > 0 else None,
            bold_driver=lr_opts.contains("-bold-driver"),
            decay=decay if decay >= 0 else None,
            momentum=lr_opts.get_float("-momentum", 0.0),
            reg_u=reg_opts.get_float("-u", reg),
            reg_i=reg_opts.get_float("-i", reg),
            reg_b=reg_opts.get_float("-b", reg),
            init=conf.get_string("init.method", "gaussian"),
            init_mean=conf.get_float("init.mean", 0.0),
            init_std=conf.get_float("init.std", 0.1),
        )
