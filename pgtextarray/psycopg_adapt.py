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
from psycopg.adapt import Dumper, Loader
from psycopg.pq import Format

from pgtextarray.arrays import TextArray
from pgtextarray.binary import TEXT_OID, decode_binary, encode_binary
from pgtextarray.literal import format_literal, parse_literal

TEXT_ARRAY_OID = 1009
VARCHAR_ARRAY_OID = 1015


class TextArrayTextLoader(Loader):
    format = Format.TEXT

    def load(self, data):
        return parse_literal(bytes(data).decode('utf-8'))


class TextArrayBinaryLoader(Loader):
    format = Format.BINARY

    def load(self, data):
        return decode_binary(data)


# Text format dumper for text[] (OID 1009)
class TextArrayTextDumper(Dumper):
    oid = TEXT_ARRAY_OID
    format = Format.TEXT

    def dump(self, obj):
        return format_literal(obj).encode('utf-8')


class TextArrayBinaryDumper(Dumper):
    oid = TEXT_ARRAY_OID
    format = Format.BINARY

    def dump(self, obj):
        return encode_binary(obj, TEXT_OID)


def register_text_array_type(context, binary):
    """Register text[]/varchar[] loaders and the TextArray dumper for the given mode."""
    for oid in (TEXT_ARRAY_OID, VARCHAR_ARRAY_OID):
        context.adapters.register_loader(oid, TextArrayTextLoader)
        context.adapters.register_loader(oid, TextArrayBinaryLoader)
    if binary:
        context.adapters.register_dumper(TextArray, TextArrayBinaryDumper)
    else:
        context.adapters.register_dumper(TextArray, TextArrayTextDumper)
