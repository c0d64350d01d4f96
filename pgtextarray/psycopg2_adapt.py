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
import psycopg2.extensions

from pgtextarray.literal import parse_literal

TEXT_ARRAY_OID = 1009
VARCHAR_ARRAY_OID = 1015


def cast_text_array(value, cursor):
    """psycopg2 typecaster: text array literal to `TextArray`, SQL NULL to None."""
    if value is None:
        return None
    return parse_literal(value)


TEXT_ARRAY = psycopg2.extensions.new_type((TEXT_ARRAY_OID, VARCHAR_ARRAY_OID), 'TEXTARRAY', cast_text_array)


def register_text_array_type(conn_or_curs=None):
    psycopg2.extensions.register_type(TEXT_ARRAY, conn_or_curs)
