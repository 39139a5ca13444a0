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

from .recommender import Recommender
from .iterative import IterativeRecommender
from .iterative import SGDTrainer
from .iterative import TrainingState

from .regsvd import RegSVD
from .biasedmf import BiasedMF

# recommenders selectable by the "recommender" configuration key
RECOMMENDERS = {
    "regsvd": RegSVD,
    "biasedmf": BiasedMF,
}


def get_model_class(name):
    """Return the recommender class registered under `name` (case-insensitive)"""
    try:
        return RECOMMENDERS[name.lower()]
    except KeyError:
        raise ValueError(
            "Unknown recommender {!r}, supported: {}".format(name, sorted(RECOMMENDERS))
        )
