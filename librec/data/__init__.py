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

from .sparse_matrix import SparseMatrix
from .sparse_matrix import SparseVector
from .sparse_matrix import MatrixEntry
from .sparse_tensor import SparseTensor
from .sparse_tensor import TensorEntry
from .reader import DataDAO
from .reader import RatingScale
from .splitter import DataSplitter

__all__ = ['SparseMatrix',
           'SparseVector',
           'MatrixEntry',
           'SparseTensor',
           'TensorEntry',
           'DataDAO',
           'RatingScale',
           'DataSplitter']
