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

from . import data
from . import eval_methods
from . import experiment
from . import metrics
from . import models
from . import utils

from .experiment import Experiment

# Also importable from root
from .config import FileConfig
from .config import HyperParams

__version__ = '1.3.0'
