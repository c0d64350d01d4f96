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

import unittest

from pgtextarray.arrays import ArrayDimension, ArrayFormatError, InvalidDimension, TextArray
from pgtextarray.literal import format_literal, parse_literal


class ParseLiteralTest(unittest.TestCase):

    def test_one_dimension(self):
        array = parse_literal('{1,2}')
        self.assertEqual(array.dimensions, [ArrayDimension(2, 1)])
        self.assertEqual(array.values(), ['1', '2'])
        self.assertEqual(array.to_json(), '["1","2"]')

    def test_null_elements(self):
        self.assertEqual(parse_literal('{a,NULL,"c"}').values(), ['a', None, 'c'])
        self.assertEqual(parse_literal('{"NULL",null,NuLl}').values(), ['NULL', None, None])

    def test_two_dimensions(self):
        array = parse_literal('{{1,2,3},{4,NULL,6}}')
        self.assertEqual(array.shape, [2, 3])
        self.assertEqual(array.values(), ['1', '2', '3', '4', None, '6'])
        self.assertEqual(array.to_nested(), [['1', '2', '3'], ['4', None, '6']])

    def test_quoted_and_escaped(self):
        array = parse_literal(r'{"a b","x\"y","back\\slash","",a\,b}')
        self.assertEqual(array.values(), ['a b', 'x"y', 'back\\slash', '', 'a,b'])

    def test_braces_inside_quotes(self):
        self.assertEqual(parse_literal('{"{x}","1,2"}').values(), ['{x}', '1,2'])

    def test_whitespace(self):
        array = parse_literal(' { a , b c ,\n"d" } ')
        self.assertEqual(array.values(), ['a', 'b c', 'd'])

    def test_empty(self):
        for literal in ('{}', '{ }', '{{},{}}'):
            with self.subTest(literal):
                array = parse_literal(literal)
                self.assertEqual(array.ndim, 0)
                self.assertEqual(array.to_json(), '[]')

    def test_dimension_decoration(self):
        array = parse_literal('[0:1]={x,y}')
        self.assertEqual(array.dimensions, [ArrayDimension(2, 0)])
        self.assertEqual(array.to_json(), '["x","y"]')

        array = parse_literal('[1:2][-3:-2]={{a,b},{c,d}}')
        self.assertEqual(array.dimensions, [ArrayDimension(2, 1), ArrayDimension(2, -3)])
        self.assertEqual(array.to_nested(), [['a', 'b'], ['c', 'd']])

    def test_decoration_upper_bound_only(self):
        self.assertEqual(parse_literal('[3]={a,b,c}').dimensions, [ArrayDimension(3, 1)])

    def test_seven_dimensions_parse_but_do_not_reconstruct(self):
        array = parse_literal('{{{{{{{x}}}}}}}')
        self.assertEqual(array.shape, [1] * 7)
        with self.assertRaises(InvalidDimension):
            array.to_json()

    def test_mismatched_sub_arrays(self):
        for literal in ('{{1,2},{3}}', '{a,{b}}', '{{a},b}', '{{},a}', '{{{1}},{2}}'):
            with self.subTest(literal):
                with self.assertRaises(ArrayFormatError):
                    parse_literal(literal)

    def test_decoration_mismatch(self):
        for literal in ('[1:3]={a,b}', '[1:2][1:1]={a,b}', '[1:1]={{a}}'):
            with self.subTest(literal):
                with self.assertRaises(ArrayFormatError):
                    parse_literal(literal)

    def test_decorated_empty_array(self):
        for literal in ('[1:0]={}', '[1:1]={}', '[1:1][1:1]={}'):
            with self.subTest(literal):
                with self.assertRaises(ArrayFormatError):
                    parse_literal(literal)

    def test_malformed(self):
        for literal in ('{1,2', 'abc', '{a,,b}', '{"a}', '{a}}', ''):
            with self.subTest(literal):
                with self.assertRaises(ArrayFormatError):
                    parse_literal(literal)

    def test_format_error_is_value_error(self):
        with self.assertRaises(ValueError):
            parse_literal('{')


class FormatLiteralTest(unittest.TestCase):

    def test_quoting(self):
        array = TextArray.from_values(['a', None, 'b c', '', 'NULL', 'q"\\'])
        self.assertEqual(format_literal(array), r'{a,NULL,"b c","","NULL","q\"\\"}')

    def test_empty(self):
        self.assertEqual(format_literal(TextArray()), '{}')

    def test_zero_length_dimension(self):
        array = TextArray.from_values([], [2, 0])
        self.assertEqual(format_literal(array), '{}')
        self.assertEqual(parse_literal(format_literal(array)).ndim, 0)

    def test_nested_with_bounds(self):
        array = TextArray.from_values(['a', 'b', 'c', 'd'], [2, 2], lower_bounds=[0, 1])
        self.assertEqual(format_literal(array), '[0:1][1:2]={{a,b},{c,d}}')

    def test_parses_back(self):
        for array in (
            TextArray.from_values(['x', None, ' y ', '{}', 'null'], [5]),
            TextArray.from_values(['1', '2', '3', '4', '5', '6'], [3, 1, 2], lower_bounds=[2, 1, 1]),
        ):
            with self.subTest(repr(array)):
                self.assertEqual(parse_literal(format_literal(array)), array)


if __name__ == '__main__':
    unittest.main()
