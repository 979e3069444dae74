############################################################
# FlatCAM: 2D Post-processing for Manufacturing            #
# http://flatcam.org                                       #
# Author: Juan Pablo Caram (c)                             #
# Date: 2/5/2014                                           #
# MIT Licence                                              #
############################################################

import re

from shapely.geometry import Polygon
from shapely.ops import unary_union

from .aperture import ApertureLibrary
from .coords import CoordinateFormat, TRAILING, LEADING
from .errors import GerberParseError, MalformedNumber, UnterminatedExtendedBlock, UnknownCommand, \
    UnsupportedInterpolationAperture, UnsupportedPrimitive
from .geometry import BoardProgram, CLEAR, DARK
from .shapes import ArcSpec, arc_geometry, circle, flash_geometry, interpolation_geometry
from .tokens import EXTENDED, TokenCursor, tokenize
from .utils import setup_log


log = setup_log("gpCamlib.gerber")


LINEAR = 1
CLOCKWISE = 2
COUNTERCLOCKWISE = 3

arcdir = [None, None, "cw", "ccw"]

# Extended commands that are deprecated and ignored.
DEPRECATED = ('AS', 'IN', 'IP', 'IR', 'LN', 'MI', 'OF', 'SF')


class GraphicsState:
    """
    Everything that changes while a Gerber program runs. One
    instance belongs to one parse.
    """

    def __init__(self):
        # Current point, inches
        self.x = 0.0
        self.y = 0.0

        # Arc center offsets, I and J
        self.i = 0.0
        self.j = 0.0

        # LINEAR, CLOCKWISE or COUNTERCLOCKWISE
        self.interpolation = LINEAR

        # How to interpret circular interpolation: SINGLE or MULTI
        self.quadrant_mode = 'SINGLE'

        # D-Dark, C-Clear
        self.polarity = DARK

        self.aperture_id = None
        self.aperture = None

        # 1, 2 or 3 from "D01", "D02" or "D03". Coordinates without
        # an operation code repeat it (deprecated).
        self.operation = None

        # If a region is being defined
        self.in_region = False

        # Contours of the current region, each is a list of (x, y).
        # The last one is open while open_contour is True.
        self.path = []
        self.open_contour = False


class Gerber:
    """
    Interprets a Gerber RS-274X program into a ``BoardProgram``.

    **ATTRIBUTES**

    * ``fmt`` (CoordinateFormat): Number format and units.
    * ``library`` (ApertureLibrary): Macros and apertures.
    * ``program`` (BoardProgram): The draw items.
    * ``warnings`` (list): ``GerberWarning`` for every command that
      was skipped or drew nothing.
    * ``stopped`` (bool): A program stop (M00/M02) was found.

    **USAGE**::

        g = Gerber()
        g.parse_file(filename)
        area = g.program.compose()

    """

    defaults = {
        "steps_per_circle": 40,
        "fill_arcs": True
    }

    #### Parser patterns ####
    # FS - Format Specification
    # L-omit leading zeros, T-omit trailing zeros
    # A-absolute notation, I-incremental notation
    fmt_re = re.compile(r'^FS([LTD])?([AI])?(?:N\d)?(?:G\d)?(?:X(\d)(\d))?(?:Y(\d)(\d))?')

    # Mode (IN/MM)
    mode_re = re.compile(r'^MO(IN|MM)')

    # AD - Aperture definition
    # Aperture Macro names: Name = [a-zA-Z_.$]{[a-zA-Z_.0-9]+}
    # NOTE: Adding "-" to support output from Upverter.
    ad_re = re.compile(r'^ADD(\d+)([a-zA-Z_$\.][a-zA-Z0-9_$\.\-]*)(?:,(.*))?$')

    # LP - Level polarity
    lpol_re = re.compile(r'^LP([DC])')

    # Sub-commands of a standard command
    gcode_re = re.compile(r'^G(\d+)')
    dcode_re = re.compile(r'^D(\d+)')
    number_re = re.compile(r'^[XYIJ]([\+\-\d\.]*)')
    linenum_re = re.compile(r'^N\d*')

    def __init__(self, steps_per_circle=None, fill_arcs=None):
        self.fmt = CoordinateFormat()
        self.library = ApertureLibrary(self.fmt, on_warning=self._warn)
        self.program = BoardProgram()
        self.state = GraphicsState()

        self.warnings = []
        self.stopped = False

        # How to discretize a circle.
        self.steps_per_circ = steps_per_circle or Gerber.defaults['steps_per_circle']

        # Circular interpolation outside regions draws pie wedges,
        # otherwise the arc is stroked with the aperture.
        self.fill_arcs = Gerber.defaults['fill_arcs'] if fill_arcs is None else fill_arcs

        # Token being interpreted, for reports.
        self._command = None
        self._position = None

    def _warn(self, warning):
        if warning.command is None:
            warning.command = self._command
        if warning.position is None:
            warning.position = self._position
        self.warnings.append(warning)
        log.warning("%s (token %s)" % (warning, warning.position))

    def parse_file(self, filename):
        """
        Reads and interprets a Gerber file.

        :param filename: Gerber file to parse.
        :type filename: str
        :return: The board program.
        :rtype: BoardProgram
        """
        with open(filename, 'r') as gfile:
            return self.parse_string(gfile.read())

    def parse_string(self, text):
        return self.parse_tokens(tokenize(text))

    def parse_tokens(self, tokens):
        """
        Main Gerber parser. Runs the commands in ``tokens`` and
        fills ``self.program``.

        Raises a ``GerberParseError`` on fatal errors. The items
        drawn up to that point stay in ``self.program``.

        :param tokens: Output of ``tokenize()``.
        :type tokens: list
        :return: The board program.
        :rtype: BoardProgram
        """
        cursor = TokenCursor(tokens)
        extended = False

        try:
            while not cursor.at_end() and not self.stopped:
                self._position = cursor.position
                token = cursor.advance()

                # Entering or leaving an extended command
                if token == EXTENDED:
                    extended = not extended
                    continue

                self._command = token = token.strip()
                if not token:
                    continue

                if extended:
                    self.do_extended(token, cursor)
                else:
                    self.do_normal(token)

            if extended and not self.stopped:
                raise UnterminatedExtendedBlock("Extended command not terminated with %", self._command,
                                                self._position)

        except GerberParseError as err:
            if err.command is None:
                err.command = self._command
            if err.position is None:
                err.position = self._position
            log.error("PARSING FAILED. Token %s: %s" % (err.position, err.command))
            raise

        self.program.finalize()
        log.debug("Parsed %d draw items, %d warnings." % (len(self.program), len(self.warnings)))
        return self.program

    ########################
    ## Extended commands ##
    ########################

    def do_extended(self, cmd, cursor):
        """
        Runs one command of an extended (%...%) block. Aperture
        macros take every remaining command of the block.
        """
        code = cmd[:2]

        ### Number format
        # Example: %FSLAX24Y24*%
        if code == 'FS':
            match = Gerber.fmt_re.search(cmd)
            zeros, notation, xi, xf, yi, yf = match.groups()
            self.fmt.zeros = TRAILING if zeros == 'T' else LEADING
            if notation == 'I':
                log.warning("Incremental notation is not supported: %s" % cmd)
            if xi is not None:
                self.fmt.x_int_digits, self.fmt.x_frac_digits = int(xi), int(xf)
            if yi is not None:
                self.fmt.y_int_digits, self.fmt.y_frac_digits = int(yi), int(yf)
            log.debug("Format: %s" % self.fmt)
            return

        ### Mode (IN/MM)
        # Example: %MOIN*%
        if code == 'MO':
            match = Gerber.mode_re.search(cmd)
            if match is None:
                self._warn(UnknownCommand("Unknown unit"))
                return
            self.fmt.units = match.group(1)
            return

        ### Aperture definitions %ADD...
        if code == 'AD':
            self.define_aperture(cmd)
            return

        ### Aperture macros
        # Example: %AMDONUT*1,1,$1,0,0*1,0,$2,0,0*%
        if code == 'AM':
            self.library.define_macro(cmd[2:], cursor.take_until(EXTENDED))
            return

        ### Polarity change
        # Example: %LPD*% or %LPC*%
        if code == 'LP':
            match = Gerber.lpol_re.search(cmd)
            if match is None:
                self._warn(UnknownCommand("Unknown polarity"))
                return
            self.state.polarity = match.group(1)
            return

        if code in DEPRECATED:
            log.debug("Deprecated extended command ignored: %s" % cmd)
            return

        self._warn(UnknownCommand("Unknown extended command"))

    def define_aperture(self, cmd):
        match = Gerber.ad_re.search(cmd)
        if match is None:
            self._warn(UnknownCommand("Malformed aperture definition"))
            return

        apid = int(match.group(1))
        if apid < 10:
            self._warn(UnknownCommand("Aperture numbers start at D10"))
            return

        modifiers = []
        if match.group(3):
            for mod in match.group(3).split('X'):
                try:
                    modifiers.append(float(mod))
                except ValueError:
                    raise MalformedNumber("Malformed aperture modifier %r" % mod, cmd)

        self.library.define_aperture(apid, match.group(2), modifiers, command=cmd)

    ########################
    ## Standard commands ##
    ########################

    def do_normal(self, cmd):
        """
        Runs the sub-commands of one standard command left to right,
        e.g. ``G01X1000Y200D01``.
        """
        state = self.state

        # Coordinates left out keep their current value.
        target = [state.x, state.y]
        coordinates = False
        operation = False

        rest = cmd
        while rest:
            letter = rest[0]

            ### Line number (ignored)
            if letter == 'N':
                rest = rest[Gerber.linenum_re.search(rest).end():]
                continue

            if letter == 'G':
                match = Gerber.gcode_re.search(rest)
                if match is None:
                    self._warn(UnknownCommand("Malformed G-code"))
                    break
                rest = rest[match.end():]
                if not self.do_gcode(int(match.group(1))):
                    break
                continue

            if letter in 'XYIJ':
                match = Gerber.number_re.search(rest)
                rest = rest[match.end():]
                try:
                    if letter == 'X':
                        target[0] = self.fmt.decode_x(match.group(1))
                        coordinates = True
                    elif letter == 'Y':
                        target[1] = self.fmt.decode_y(match.group(1))
                        coordinates = True
                    elif letter == 'I':
                        state.i = self.fmt.decode_x(match.group(1))
                    else:
                        state.j = self.fmt.decode_y(match.group(1))
                except MalformedNumber as err:
                    err.command = cmd
                    raise
                continue

            ### Operation code
            if letter == 'D':
                match = Gerber.dcode_re.search(rest)
                if match is None:
                    self._warn(UnknownCommand("Malformed D-code"))
                    break
                rest = rest[match.end():]
                self.do_operation(int(match.group(1)), target)
                operation = True
                continue

            ### Program stop
            if letter == 'M':
                if rest.startswith('M00') or rest.startswith('M02'):
                    log.debug("Program stop: %s" % rest)
                    self.stopped = True
                break

            self._warn(UnknownCommand("Unrecognized command"))
            break

        # Operation code missing is deprecated... oh well I will support it.
        if coordinates and not operation and state.operation is not None:
            log.debug("Repeating D0%d for %s" % (state.operation, cmd))
            self.do_operation(state.operation, target)

        state.x, state.y = target

    def do_gcode(self, code):
        """
        :return: False if the rest of the command is to be ignored.
        """
        state = self.state

        if code in (1, 10):
            state.interpolation = LINEAR
        elif code == 2:
            state.interpolation = CLOCKWISE
        elif code == 3:
            state.interpolation = COUNTERCLOCKWISE
        elif code == 4:
            # Comment
            return False
        elif code == 36:
            self.start_region()
        elif code == 37:
            self.end_region()
        elif code in (54, 55):
            # Aperture select prefix, deprecated
            pass
        elif code == 70:
            # Units (OBSOLETE)
            self.fmt.units = 'IN'
        elif code == 71:
            self.fmt.units = 'MM'
        elif code == 74:
            state.quadrant_mode = 'SINGLE'
        elif code == 75:
            state.quadrant_mode = 'MULTI'
        elif code in (90, 91):
            # Absolute/relative coordinates (OBSOLETE)
            log.debug("Ignoring G%02d" % code)
        else:
            self._warn(UnknownCommand("Unknown G-code G%02d" % code))
        return True

    def do_operation(self, code, target):
        state = self.state

        ### Tool/aperture change
        # Example: D12*
        if code >= 10:
            state.aperture = self.library.lookup(code, command=self._command)
            state.aperture_id = code
            log.debug("Aperture change to D%d" % code)
            return

        if code == 1:
            self.interpolate(target)
        elif code == 2:
            if state.in_region:
                self.region_move(target)
        elif code == 3:
            self.flash(target)
        else:
            self._warn(UnknownCommand("Unknown operation code D%02d" % code))
            return

        state.operation = code
        state.x, state.y = target

    def selected_elements(self):
        if self.state.aperture is None:
            self._warn(UnknownCommand("No aperture selected"))
            return []
        return self.state.aperture.elements()

    def arc_spec(self, target):
        state = self.state
        return ArcSpec((state.x, state.y), tuple(target), (state.i, state.j),
                       arcdir[state.interpolation], state.quadrant_mode)

    ### D01
    def interpolate(self, target):
        state = self.state

        if state.in_region:
            if state.interpolation == LINEAR:
                self.region_line_to(target)
            else:
                self.region_arc(self.arc_spec(target))
            return

        if state.interpolation == LINEAR:
            start, stop = (state.x, state.y), tuple(target)
            for element in self.selected_elements():
                try:
                    shapes = interpolation_geometry(element, start, stop, self.steps_per_circ)
                except UnsupportedInterpolationAperture as warning:
                    self._warn(warning)
                    continue
                for geo in shapes:
                    self.program.append(geo, state.polarity)
            return

        spec = self.arc_spec(target)
        log.debug("Arc: %s" % spec)
        for element in self.selected_elements():
            geo = arc_geometry(spec, self.steps_per_circ, filled=self.fill_arcs, width=element.size)
            self.program.append(geo, state.polarity)

    ### D03
    def flash(self, target):
        x, y = target
        for element in self.selected_elements():
            try:
                geo, hole = flash_geometry(element, x, y, self.steps_per_circ)
            except UnsupportedPrimitive as warning:
                self._warn(warning)
                continue

            self.program.append(geo, self.state.polarity)

            # Holes clear whatever is under them.
            if hole is not None:
                self.program.append(circle(x, y, hole, self.steps_per_circ), CLEAR)

    #############
    ## Regions ##
    #############

    def start_region(self):
        state = self.state
        state.in_region = True
        state.path = []
        state.open_contour = False

    def region_move(self, target):
        state = self.state
        state.path.append([tuple(target)])
        state.open_contour = True

    def region_line_to(self, target):
        state = self.state
        if not state.open_contour:
            # First point of a contour is a move.
            self.region_move(target)
            return
        state.path[-1].append(tuple(target))

    def region_arc(self, spec):
        state = self.state
        points = spec.points(self.steps_per_circ)
        if not state.open_contour:
            state.path.append(points)
            state.open_contour = True
            return
        contour = state.path[-1]
        if contour[-1] == points[0]:
            points = points[1:]
        contour.extend(points)

    def end_region(self):
        """
        Fills the contours of the region into one draw item.
        """
        state = self.state

        polygons = []
        for contour in state.path:
            if len(set(contour)) < 3:
                log.debug("Region contour with less than 3 points ignored.")
                continue
            poly = Polygon(contour)
            if not poly.is_valid:
                poly = poly.buffer(0)
            polygons.append(poly)

        if len(polygons) == 1:
            self.program.append(polygons[0], state.polarity)
        elif len(polygons) > 1:
            self.program.append(unary_union(polygons), state.polarity)

        state.in_region = False
        state.path = []
        state.open_contour = False

    def bounds(self):
        return self.program.bounds()
