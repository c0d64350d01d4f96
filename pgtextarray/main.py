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
"""Marshal the result of an array query into JSON, with and without reconstruction."""

import argparse
import json
import os
import sys

import psycopg
import psycopg2

from pgtextarray import psycopg2_adapt, psycopg_adapt
from pgtextarray.arrays import TextArray

DEFAULT_QUERY = "SELECT '{1,2}'::text[]"
DRIVERS = ['psycopg', 'psycopg2']


def log_query(query):
    sys.stderr.write(f'>>> {query}\n')
    sys.stderr.flush()
    return query


def fail(stage, error):
    sys.stderr.write(f'{stage}: {error}\n')
    return 1


def connect(driver, conninfo):
    if driver == 'psycopg':
        return psycopg.connect(conninfo, autocommit=True)
    return psycopg2.connect(conninfo)


def fetch_value(connection, query, binary, verbose):
    if verbose:
        log_query(query)
    if isinstance(connection, psycopg.Connection):
        with connection.cursor(binary=binary) as cursor:
            cursor.execute(query)
            row = cursor.fetchone()
    else:
        cursor = connection.cursor()
        try:
            cursor.execute(query)
            row = cursor.fetchone()
        finally:
            cursor.close()
    if row is None:
        raise ValueError("no rows in result set")
    return row[0]


def register_text_array(connection, binary):
    if isinstance(connection, psycopg.Connection):
        psycopg_adapt.register_text_array_type(connection, binary)
    else:
        psycopg2_adapt.register_text_array_type(connection)


def marshal(value):
    if isinstance(value, TextArray):
        return value.to_json()
    return json.dumps(value, ensure_ascii=False, separators=(',', ':'))


def run(args):
    try:
        connection = connect(args.driver, args.conninfo)
    except (psycopg.Error, psycopg2.Error) as e:
        return fail('connect', e)

    try:
        print(f"Marshalling result of `{args.query}` into JSON.")

        try:
            value = fetch_value(connection, args.query, args.binary, args.verbose)
        except (psycopg.Error, psycopg2.Error, ValueError) as e:
            return fail('query row', e)
        try:
            print(f"{args.driver}: {marshal(value)}")
        except (TypeError, ValueError) as e:
            return fail('json marshal', e)

        register_text_array(connection, args.binary)
        try:
            value = fetch_value(connection, args.query, args.binary, args.verbose)
        except (psycopg.Error, psycopg2.Error, ValueError) as e:
            return fail('query row', e)
        if value is not None and not isinstance(value, TextArray):
            return fail('query row', f"cannot scan {type(value).__name__} into a text array")
        try:
            print(f"custom: {marshal(value)}")
        except ValueError as e:
            return fail('json marshal', f"reconstructing array failed: {e}")
    finally:
        connection.close()
    return 0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        'conninfo', nargs='?', default=os.getenv('DATABASE_URL'),
        help='Connection string to the Postgres database (default: $DATABASE_URL)')
    parser.add_argument('--driver', choices=DRIVERS, default='psycopg', help='Database driver (default: psycopg)')
    parser.add_argument('--binary', action='store_true', help='Fetch results in binary format (psycopg only)')
    parser.add_argument('--query', default=DEFAULT_QUERY, help=f'Array query to run (default: {DEFAULT_QUERY})')
    parser.add_argument('-v', '--verbose', action='store_true', help='Echo queries to stderr')
    args = parser.parse_args(argv)
    if not args.conninfo:
        parser.error('please provide connection string to Postgres database')
    if args.binary and args.driver != 'psycopg':
        parser.error('--binary is only supported by the psycopg driver')
    return args


def main(argv=None):
    sys.exit(run(parse_args(argv)))


if __name__ == '__main__':
    main()
