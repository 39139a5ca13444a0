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

import numbers

import numpy as np


def clip(values, lower_bound, upper_bound):
    """Bound `values` (scalar or array) to [lower_bound, upper_bound]"""
    values = np.where(values < lower_bound, lower_bound, values)
    return np.where(values > upper_bound, upper_bound, values)


def get_rng(seed):
    """Random generator for `seed`.

    None gives the global numpy RandomState, an integer a new RandomState
    seeded with it, and a RandomState is returned as is.
    """
    if seed is None:
        return np.random.mtrand._rand
    if isinstance(seed, np.random.RandomState):
        return seed
    if isinstance(seed, (numbers.Integral, np.integer)):
        return np.random.RandomState(seed)
    raise ValueError("Cannot build a numpy RandomState from {!r}".format(seed))


def validate_ratio(ratio, name="ratio"):
    """Return `ratio` as a float, raising ValueError unless 0 < ratio < 1"""
    if not isinstance(ratio, (numbers.Real, np.floating)) or not 0.0 < ratio < 1.0:
        raise ValueError("{} must be in (0, 1) but {}".format(name, ratio))

    return float(ratio)
