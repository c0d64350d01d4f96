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

import struct

from pgtextarray.arrays import ABSENT, ArrayDimension, ArrayFormatError, Element, TextArray, product

TEXT_OID = 25
VARCHAR_OID = 1043

#  binary array format:
# - 4 bytes: number of dimensions
# - 4 bytes: has null flag (1 if any element is null)
# - 4 bytes: element type OID
# For each dimension:
# - 4 bytes: dimension size
# - 4 bytes: lower bound
# For each element:
# - 4 bytes: element length (-1 for null, otherwise byte length)
# - N bytes: element data (if not null)
_HEADER = struct.Struct('>iiI')
_DIMENSION = struct.Struct('>ii')
_LENGTH = struct.Struct('>i')


def decode_binary(data):
    """Decode a binary ``text[]``/``varchar[]`` payload into a flat `TextArray`."""
    data = memoryview(data)
    try:
        ndim, _, element_oid = _HEADER.unpack_from(data, 0)
        offset = _HEADER.size
        dimensions = []
        for _ in range(ndim):
            length, lower_bound = _DIMENSION.unpack_from(data, offset)
            offset += _DIMENSION.size
            dimensions.append(ArrayDimension(length, lower_bound))

        count = product(d.length for d in dimensions) if dimensions else 0
        elements = []
        for _ in range(count):
            (size,) = _LENGTH.unpack_from(data, offset)
            offset += _LENGTH.size
            if size == -1:
                elements.append(ABSENT)
                continue
            if size < 0 or offset + size > len(data):
                raise ArrayFormatError(f"array element of {size} bytes overruns the payload")
            try:
                string = bytes(data[offset:offset + size]).decode('utf-8')
            except UnicodeDecodeError as e:
                raise ArrayFormatError(f"array element is not valid UTF-8: {e}") from e
            elements.append(Element(string, True))
            offset += size
    except struct.error as e:
        raise ArrayFormatError(f"truncated binary array: {e}") from e

    if offset != len(data):
        raise ArrayFormatError(f"{len(data) - offset} trailing byte(s) after binary array")
    return TextArray(elements, dimensions, element_oid=element_oid)


def encode_binary(array, element_oid=TEXT_OID):
    has_null = 1 if any(not e.present for e in array.elements) else 0
    header = _HEADER.pack(array.ndim, has_null, element_oid)
    dimensions = [_DIMENSION.pack(d.length, d.lower_bound) for d in array.dimensions]

    elements = []
    for e in array.elements:
        if not e.present:
            elements.append(_LENGTH.pack(-1))
        else:
            data = e.string.encode('utf-8')
            elements.append(_LENGTH.pack(len(data)) + data)

    return header + b''.join(dimensions) + b''.join(elements)
