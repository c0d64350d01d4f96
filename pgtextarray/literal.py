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

"""
PostgreSQL text array literals, e.g. ``{a,NULL,"b c"}`` or ``[0:1]={{x},{y}}``.

The grammar is a PEG over the output syntax of ``array_out``; the parser turns
it into the same flat element list plus dimensions that a binary scan yields.
"""

import re

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from pgtextarray.arrays import ABSENT, ArrayDimension, ArrayFormatError, Element, TextArray, flatten, product, reconstruct

GRAMMAR = Grammar(r"""
array_lit   = ws bounds? array_def ws
bounds      = bound+ ws "=" ws
bound       = ws "[" ws integer ws upper? "]"
upper       = ":" ws integer ws
array_def   = "{" ws elements? ws "}"
elements    = element (ws "," ws element)*
element     = array_def / quoted / unquoted
quoted      = ~r'"(?:[^"\\]|\\.)*"'s
unquoted    = ~r'(?:[^{},"\\\s]|\\.)+(?:\s+(?:[^{},"\\\s]|\\.)+)*'s
integer     = ~r"[+-]?\d+"
ws          = ~r"\s*"
""")

_ESCAPE = re.compile(r'\\(.)', re.DOTALL)
_NEEDS_QUOTES = re.compile(r'[{},"\\\s]')


def _unescape(text):
    return _ESCAPE.sub(r'\1', text)


class _LiteralVisitor(NodeVisitor):
    """Turns a parse tree into (bounds, nested lists of Element)."""

    def visit_array_lit(self, node, visited_children):
        _, bounds, nested, _ = visited_children
        bounds = bounds[0] if isinstance(bounds, list) else None
        return bounds, nested

    def visit_bounds(self, node, visited_children):
        bounds, _, _, _ = visited_children
        return bounds

    def visit_bound(self, node, visited_children):
        _, _, _, first, _, upper, _ = visited_children
        if isinstance(upper, list):
            return first, upper[0]
        return 1, first

    def visit_upper(self, node, visited_children):
        _, _, value, _ = visited_children
        return value

    def visit_array_def(self, node, visited_children):
        _, _, elements, _, _ = visited_children
        return elements[0] if isinstance(elements, list) else []

    def visit_elements(self, node, visited_children):
        first, rest = visited_children
        elements = [first]
        if isinstance(rest, list):
            elements.extend(item[3] for item in rest)
        return elements

    def visit_element(self, node, visited_children):
        return visited_children[0]

    def visit_quoted(self, node, visited_children):
        return Element(_unescape(node.text[1:-1]), True)

    def visit_unquoted(self, node, visited_children):
        if node.text.lower() == 'null':
            return ABSENT
        return Element(_unescape(node.text), True)

    def visit_integer(self, node, visited_children):
        return int(node.text)

    def visit_ws(self, node, visited_children):
        return None

    def generic_visit(self, node, visited_children):
        return visited_children or node


def _shape_of(nested):
    shape = []
    while isinstance(nested, list):
        shape.append(len(nested))
        if not nested:
            break
        nested = nested[0]
    return shape


def _check_shape(nested, shape):
    if not shape:
        if isinstance(nested, list):
            raise ArrayFormatError("multidimensional arrays must have sub-arrays with matching dimensions")
        return
    if not isinstance(nested, list) or len(nested) != shape[0]:
        raise ArrayFormatError("multidimensional arrays must have sub-arrays with matching dimensions")
    for sub in nested:
        _check_shape(sub, shape[1:])


def _check_bounds(text, bounds, shape):
    if len(bounds) != len(shape):
        raise ArrayFormatError(f"specified array dimensions do not match array contents: {text!r}")
    dimensions = []
    for (lower, upper), length in zip(bounds, shape):
        if upper < lower:
            raise ArrayFormatError(f"upper bound cannot be less than lower bound: {text!r}")
        if upper - lower + 1 != length:
            raise ArrayFormatError(f"specified array dimensions do not match array contents: {text!r}")
        dimensions.append(ArrayDimension(length, lower))
    return dimensions


def parse_literal(text):
    """Parse a text array literal into a flat `TextArray`."""
    try:
        bounds, nested = _LiteralVisitor().visit(GRAMMAR.parse(text))
    except ParseError as e:
        raise ArrayFormatError(f"malformed array literal: {text!r}") from e

    shape = _shape_of(nested)
    _check_shape(nested, shape)

    if bounds is None:
        dimensions = [ArrayDimension(length, 1) for length in shape]
    else:
        dimensions = _check_bounds(text, bounds, shape)

    if product(shape) == 0:
        # no scalar elements at any depth: PostgreSQL's empty array
        return TextArray()
    return TextArray(flatten(nested, len(shape)), dimensions)


def _quote(value):
    if value is None:
        return 'NULL'
    if value == '' or value.lower() == 'null' or _NEEDS_QUOTES.search(value):
        escaped = value.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'
    return value


def _format_nested(nested, rank):
    if rank <= 1:
        return '{' + ','.join(_quote(v) for v in nested) + '}'
    return '{' + ','.join(_format_nested(sub, rank - 1) for sub in nested) + '}'


def format_literal(array):
    """Render a `TextArray` the way PostgreSQL prints it."""
    if array.ndim == 0 or product(array.shape) == 0:
        return '{}'
    literal = _format_nested(reconstruct(array.elements, array.shape), array.ndim)
    if any(d.lower_bound != 1 for d in array.dimensions):
        decoration = ''.join(f'[{d.lower_bound}:{d.lower_bound + d.length - 1}]' for d in array.dimensions)
        return f'{decoration}={literal}'
    return literal
