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

from .base_method import BaseMethod
from .base_method import MetricAccumulator
from .base_method import rating_eval
from .ratio_split import RatioSplit
from .given_n import GivenN
from .cross_validation import CrossValidation
from .leave_one_out import LeaveOneOut

__all__ = ['BaseMethod',
           'MetricAccumulator',
           'rating_eval',
           'RatioSplit',
           'GivenN',
           'CrossValidation',
           'LeaveOneOut']
