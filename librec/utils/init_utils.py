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

import numpy as np

from .common import get_rng


def zeros(shape, dtype=np.float64):
    return np.zeros(shape, dtype=dtype)


def uniform(shape=None, low=0.0, high=1.0, random_state=None, dtype=np.float64):
    """Samples of U[low, high).

    Parameters
    ----------
    shape : int or tuple of ints, optional
        Output shape, a single value when None.
    low, high : float, optional
        Bounds of the interval.
    random_state : int or np.random.RandomState, optional
        Seed or generator, see :func:`librec.utils.get_rng`.
    dtype : str or dtype
        Output data type.
    """
    return get_rng(random_state).uniform(low, high, shape).astype(dtype)


def normal(shape=None, mean=0.0, std=1.0, random_state=None, dtype=np.float64):
    """Samples of N(mean, std^2), with the same arguments as :func:`uniform`"""
    return get_rng(random_state).normal(mean, std, shape).astype(dtype)
