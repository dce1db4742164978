#
# MIT License
#
# (C) Copyright 2026 Hewlett Packard Enterprise Development LP
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included
# in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL
# THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR
# OTHER LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE,
# ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR
# OTHER DEALINGS IN THE SOFTWARE.
#
"""
Class to define a field on an inventory record.
"""
from decimal import Decimal, InvalidOperation
import re

NULL_VALUES = ('', 'null')


def to_int(value):
    """Converts a raw field value to an int.

    Integral decimal text such as '8192.0' is accepted.

    Raises:
        ValueError: if the value is not an integral number.
    """
    if isinstance(value, int):
        return value
    number = to_decimal(value)
    if number != number.to_integral_value():
        raise ValueError(f"'{value}' is not an integer")
    return int(number)


def to_decimal(value):
    """Converts a raw field value to a Decimal, keeping the text as given.

    Raises:
        ValueError: if the value is not a number.
    """
    if isinstance(value, Decimal):
        return value
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as err:
        raise ValueError(f"'{value}' is not a number") from err
    if not number.is_finite():
        raise ValueError(f"'{value}' is not a finite number")
    return number


def to_str(value):
    return str(value).strip()


def to_lower(value):
    return to_str(value).lower()


class RecordField:
    """A field of an inventory record."""

    def __init__(self, pretty_name, converter=to_str, property_name=None):
        """Creates a new record field.

        Args:
            pretty_name (str): The human-readable name of the field, used as
                the heading in tabular renderings.
            converter (callable): Converts a raw, non-null value to the type
                of the field. May raise ValueError or TypeError.
            property_name (str): The name of the attribute that holds the value
                of this field on the record. Defaults to a canonical version
                of the `pretty_name`, which is all lowercase and has spaces and
                hyphens replaced with underscores.
        """
        self.pretty_name = pretty_name
        self.converter = converter
        self.canonical_name = self.canonicalize(pretty_name)
        self.property_name = property_name if property_name else self.canonical_name

    def coerce(self, raw_value):
        """Converts a raw value to the type of this field.

        None, empty strings and the literal 'null' are all read as None.

        Raises:
            ValueError: if the raw value cannot be converted.
        """
        if raw_value is None:
            return None
        if isinstance(raw_value, str) and raw_value.strip().lower() in NULL_VALUES:
            return None
        try:
            return self.converter(raw_value)
        except TypeError as err:
            raise ValueError(str(err)) from err

    @staticmethod
    def canonicalize(name):
        """Canonicalize the given name by converting to lowercase and replacing chars.

        Replaces '-' and ' ' with '_'. Removes parentheses.

        Returns:
            The canonical form of the given name.
        """
        return re.sub(r'[- ]', '_', re.sub(r'[()]', '', name.lower()))

    def __eq__(self, other):
        return (self.pretty_name, self.property_name) == \
               (other.pretty_name, other.property_name)

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((self.pretty_name, self.property_name))

    def __repr__(self):
        return f'RecordField({self.pretty_name!r}, property_name={self.property_name!r})'
