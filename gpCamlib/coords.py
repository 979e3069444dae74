############################################################
# FlatCAM: 2D Post-processing for Manufacturing            #
# http://flatcam.org                                       #
# Author: Juan Pablo Caram (c)                             #
# Date: 2/5/2014                                           #
# MIT Licence                                              #
############################################################

import re

from .errors import MalformedNumber


MM_PER_INCH = 25.4

LEADING = 'L'
TRAILING = 'T'

int_re = re.compile(r'^[\+-]?(\d+)$')


def parse_gerber_number(strnumber, int_digits, frac_digits, zeros=LEADING, units='IN'):
    """
    Parse a single number of Gerber coordinates.

    :param strnumber: String containing a number in decimal digits
        from a coordinate data block, possibly with a leading sign.
    :type strnumber: str
    :param int_digits: Number of digits used for the integer
        part of the number
    :type int_digits: int
    :param frac_digits: Number of digits used for the fractional
        part of the number
    :type frac_digits: int
    :param zeros: 'L' if leading zeros are omitted, 'T' if
        trailing zeros are omitted (deprecated).
    :param units: 'IN' or 'MM'
    :return: The number in inches.
    :rtype: float
    """
    match = int_re.search(strnumber)
    if not match:
        raise MalformedNumber("Malformed number %r" % strnumber, strnumber)

    value = float(int(strnumber))

    # Omitted trailing zeros are put back on the right. The sign
    # counts as a digit.
    if zeros == TRAILING:
        value *= 10.0 ** (int_digits + frac_digits - len(strnumber))

    value /= 10.0 ** frac_digits

    if units == 'MM':
        return value / MM_PER_INCH
    return value


class CoordinateFormat:
    """
    Number format of a Gerber program, set by the FS and MO
    commands.
    """

    def __init__(self):
        self.zeros = LEADING
        self.x_int_digits = 2
        self.x_frac_digits = 3
        self.y_int_digits = 2
        self.y_frac_digits = 3
        self.units = 'IN'

    def __repr__(self):
        return "<CoordinateFormat %s X%d%d Y%d%d %s>" % (self.zeros, self.x_int_digits, self.x_frac_digits,
                                                         self.y_int_digits, self.y_frac_digits, self.units)

    def decode(self, digits, int_digits, frac_digits):
        return parse_gerber_number(digits, int_digits, frac_digits, self.zeros, self.units)

    def decode_x(self, digits):
        return self.decode(digits, self.x_int_digits, self.x_frac_digits)

    def decode_y(self, digits):
        return self.decode(digits, self.y_int_digits, self.y_frac_digits)

    def to_inches(self, value):
        """
        Converts a decimal length, e.g. an aperture size, from
        the current units into inches.
        """
        if self.units == 'MM':
            return value / MM_PER_INCH
        return value
