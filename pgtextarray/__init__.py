#      ___                  _   ____  ____
#     / _ \ _   _  ___  ___| |_|  _ \| __ )
#    | | | | | | |/ _ \/ __| __| | | |  _ \
#    | |_| | |_| |  __/\__ \ |_| |_| | |_) |
#     \__\_\\__,_|\___||___/\__|____/|____/
#
#   Copyright (c) 2014-2019 Appsicle
#   Copyright (c) 2019-2026 QuestDB
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.
#

from pgtextarray.arrays import (
    ABSENT,
    MAX_DIMENSIONS,
    ArrayDimension,
    ArrayFormatError,
    Element,
    InvalidDimension,
    ShapeMismatch,
    TextArray,
    extract_dimensions,
    flatten,
    reconstruct,
)
from pgtextarray.binary import decode_binary, encode_binary
from pgtextarray.literal import format_literal, parse_literal

__version__ = '0.1.0'
