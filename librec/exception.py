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


class LibRecException(Exception):
    """Base exception of the library."""
    pass


class ScoreException(LibRecException):
    """Raised when a model cannot score a (user, item) pair."""
    pass


class StructureError(LibRecException, IndexError):
    """Raised when a position does not exist in a sparse structure,
    or when tensor keys do not fit the tensor dimensions."""
    pass


class DivergenceError(LibRecException, ArithmeticError):
    """Raised when the training loss becomes NaN or infinite."""

    def __init__(self, model_name, epoch, loss):
        super().__init__(
            "Loss = NaN or Infinity: current settings do not fit {} "
            "(epoch {}, loss {})".format(model_name, epoch, loss)
        )
        self.model_name = model_name
        self.epoch = epoch
        self.loss = loss


class ConfigError(LibRecException, ValueError):
    """Raised on missing or malformed configuration values."""
    pass


class DataFormatError(LibRecException, ValueError):
    """Raised when a line of a rating file cannot be parsed."""

    def __init__(self, path, line_no, message):
        super().__init__("{}:{}: {}".format(path, line_no, message))
        self.path = path
        self.line_no = line_no
