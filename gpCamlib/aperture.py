############################################################
# FlatCAM: 2D Post-processing for Manufacturing            #
# http://flatcam.org                                       #
# Author: Juan Pablo Caram (c)                             #
# Date: 2/5/2014                                           #
# MIT Licence                                              #
############################################################


import re

from .errors import ApertureNotDefined, ApertureRedefined, MacroNotDefined, \
    UnsupportedMacroEquation, UnsupportedPrimitive
from .utils import setup_log


log = setup_log("gpCamlib.aperture")


## Standard aperture kinds
CIRCLE = 'C'
RECTANGLE = 'R'
OBROUND = 'O'
POLYGON = 'P'

STANDARD_KINDS = (CIRCLE, RECTANGLE, OBROUND, POLYGON)

## Macro primitive codes
PRIM_CIRCLE = 1
PRIM_VECTOR_LINE = 20
PRIM_CENTER_LINE = 21
PRIM_OUTLINE = 4
PRIM_POLYGON = 5
PRIM_MOIRE = 6
PRIM_THERMAL = 7

PRIMITIVE_NAMES = {
    PRIM_CIRCLE: "circle",
    PRIM_VECTOR_LINE: "vector line",
    PRIM_CENTER_LINE: "center line",
    PRIM_OUTLINE: "outline",
    PRIM_POLYGON: "polygon",
    PRIM_MOIRE: "moire",
    PRIM_THERMAL: "thermal"
}

# Code 2 is the deprecated name of the vector line.
PRIMITIVE_ALIASES = {2: PRIM_VECTOR_LINE}

# Parameter count without the optional trailing rotation.
PRIMITIVE_MIN_PARAMS = {
    PRIM_CIRCLE: 4,
    PRIM_VECTOR_LINE: 6,
    PRIM_CENTER_LINE: 5,
    PRIM_POLYGON: 5,
    PRIM_MOIRE: 8,
    PRIM_THERMAL: 5
}

# Indexes of the parameters that are lengths.
PRIMITIVE_LENGTHS = {
    PRIM_CIRCLE: (1, 2, 3),
    PRIM_VECTOR_LINE: (1, 2, 3, 4, 5),
    PRIM_CENTER_LINE: (1, 2, 3, 4),
    PRIM_POLYGON: (2, 3, 4),
    PRIM_MOIRE: (0, 1, 2, 3, 4, 6, 7),
    PRIM_THERMAL: (0, 1, 2, 3, 4)
}

STANDARD_LENGTHS = {
    CIRCLE: (0, 1),
    RECTANGLE: (0, 1, 2),
    OBROUND: (0, 1, 2),
    POLYGON: (0, 3)
}


class StandardAperture:
    """
    Circle (C), rectangle (R), obround (O) or regular polygon (P).

    ``modifiers`` are kept in the order they were declared:

    +------+------------------------------------------------+
    | Kind | Modifiers                                      |
    +======+================================================+
    | C    | diameter, [hole diameter]                      |
    +------+------------------------------------------------+
    | R    | width, height, [hole diameter]                 |
    +------+------------------------------------------------+
    | O    | width, height, [hole diameter]                 |
    +------+------------------------------------------------+
    | P    | outer diameter, vertices, [rotation], [hole]   |
    +------+------------------------------------------------+
    """

    def __init__(self, kind, modifiers):
        self.kind = kind
        self.modifiers = tuple(modifiers)

    def __repr__(self):
        return "<StandardAperture %s %s>" % (self.kind, list(self.modifiers))

    @property
    def size(self):
        return self.modifiers[0] if self.modifiers else 0.0

    def elements(self):
        return [self]


class PrimitiveInstance:
    """
    One macro primitive with every parameter resolved to a number.
    ``params`` starts with the first modifier after the primitive code.
    """

    def __init__(self, code, params):
        self.code = code
        self.params = tuple(params)

    def __repr__(self):
        return "<PrimitiveInstance %s %s>" % (self.name, list(self.params))

    @property
    def name(self):
        return PRIMITIVE_NAMES.get(self.code, str(self.code))

    @property
    def size(self):
        return self.params[1] if len(self.params) > 1 else 0.0

    def elements(self):
        return [self]


class MacroAperture:
    """
    Aperture defined through an aperture macro. It stands for
    all of its primitives.
    """

    def __init__(self, name, primitives):
        self.name = name
        self.primitives = tuple(primitives)

    def __repr__(self):
        return "<MacroAperture %s, %d primitives>" % (self.name, len(self.primitives))

    def elements(self):
        return list(self.primitives)


class ApertureMacro:
    """
    Syntax of aperture macros.

    <AM command>:           AM<Aperture macro name>*<Macro content>
    <Macro content>:        {{<Variable definition>*}{<Primitive>*}}
    <Variable definition>:  $K=<Arithmetic expression>
    <Primitive>:            <Primitive code>,<Modifier>{,<Modifier>}|<Comment>
    <Modifier>:             $M|< Arithmetic expression>
    <Comment>:              0 <Text>

    The raw lines are kept as they are and only expanded when an
    aperture is defined with this macro, since every aperture brings
    its own modifiers.
    """

    ## Regular expressions
    amcomm_re = re.compile(r'^0(?![0-9])(.*)')
    amparam_re = re.compile(r'^\$([0-9]+)$')

    def __init__(self, name, raw=None):
        self.name = name
        self.raw = [line.strip() for line in (raw or [])]

    def __repr__(self):
        return "<ApertureMacro %s, %d lines>" % (self.name, len(self.raw))

    def expand(self, modifiers, to_inches=None, on_warning=None):
        """
        Creates the numerical primitives of this macro for the given
        aperture modifiers. Every ``$n`` parameter is replaced by the
        n-th modifier (1-indexed), undefined ones read as zero.

        :param modifiers: Modifiers of the aperture definition.
        :type modifiers: list
        :param to_inches: Converts a length into inches.
        :param on_warning: Called with a ``GerberWarning`` for every
            skipped line.
        :return: The primitives, in order.
        :rtype: list
        """
        to_inches = to_inches or (lambda value: value)
        on_warning = on_warning or (lambda warning: log.warning(str(warning)))

        primitives = []
        for part in self.raw:
            if not part:
                continue

            ### Comments. Ignored.
            if ApertureMacro.amcomm_re.search(part):
                continue

            ### Variables
            if part.startswith('$'):
                on_warning(UnsupportedMacroEquation("Macro %s: variable definitions are not supported" % self.name,
                                                    part))
                continue

            elements = [e.strip() for e in part.split(',')]
            try:
                code = int(elements[0])
            except ValueError:
                on_warning(UnsupportedPrimitive("Macro %s: unknown primitive" % self.name, part))
                continue
            code = PRIMITIVE_ALIASES.get(code, code)

            if code not in PRIMITIVE_NAMES:
                on_warning(UnsupportedPrimitive("Macro %s: unknown primitive code %d" % (self.name, code), part))
                continue

            params = []
            for element in elements[1:]:
                value = self.resolve_param(element, modifiers)
                if value is None:
                    break
                params.append(value)
            else:
                params = self.normalize(code, params)
                if params is None:
                    on_warning(UnsupportedPrimitive("Macro %s: incomplete %s primitive" %
                                                    (self.name, PRIMITIVE_NAMES[code]), part))
                    continue
                primitive = PrimitiveInstance(code, self.scale(code, params, to_inches))
                log.debug("Macro %s: %s" % (self.name, primitive))
                primitives.append(primitive)
                continue

            on_warning(UnsupportedMacroEquation("Macro %s: arithmetic expressions are not supported" % self.name,
                                                part))

        return primitives

    @staticmethod
    def resolve_param(element, modifiers):
        """
        :return: The numerical value of a primitive parameter,
            or None if it is an expression.
        """
        match = ApertureMacro.amparam_re.search(element)
        if match:
            idx = int(match.group(1))
            if 1 <= idx <= len(modifiers):
                return float(modifiers[idx - 1])
            return 0.0

        try:
            return float(element)
        except ValueError:
            return None

    @staticmethod
    def default2zero(n, mods):
        """
        Pads the ``mods`` list with zeros resulting in an
        list of length n.

        :param n: Length of the resulting list.
        :type n: int
        :param mods: List to be padded.
        :type mods: list
        :return: Zero-padded list.
        :rtype: list
        """
        x = [0.0] * max(n, len(mods))
        x[0:len(mods)] = mods
        return x

    @staticmethod
    def normalize(code, params):
        """
        Checks the parameter count of a primitive and appends
        the rotation when it was left out.

        :return: The padded parameters or None if some are missing.
        """
        if code == PRIM_OUTLINE:
            if len(params) < 2:
                return None
            n = int(params[1])
            needed = 2 + 2 * (n + 1)
            if n < 1 or len(params) < needed:
                return None
            return ApertureMacro.default2zero(needed + 1, params)

        needed = PRIMITIVE_MIN_PARAMS[code]
        if len(params) < needed:
            return None
        return ApertureMacro.default2zero(needed + 1, params)

    @staticmethod
    def scale(code, params, to_inches):
        if code == PRIM_OUTLINE:
            lengths = range(2, len(params) - 1)
        else:
            lengths = PRIMITIVE_LENGTHS[code]
        return [to_inches(p) if i in lengths else p for i, p in enumerate(params)]


class ApertureLibrary:
    """
    Aperture macros by name and apertures by D-code of one
    Gerber program.
    """

    def __init__(self, fmt=None, on_warning=None):
        # Provides to_inches() for aperture sizes.
        self.fmt = fmt

        self.on_warning = on_warning

        self.macros = {}
        self.apertures = {}

    def to_inches(self, value):
        if self.fmt is None:
            return value
        return self.fmt.to_inches(value)

    def define_macro(self, name, raw_lines):
        """
        Stores a macro without expanding it.

        :param name: Macro name.
        :param raw_lines: Primitive lines as found in the AM command.
        :return: The macro.
        :rtype: ApertureMacro
        """
        macro = ApertureMacro(name, raw_lines)
        self.macros[name] = macro
        log.debug("Defined macro %s (%d lines)" % (name, len(macro.raw)))
        return macro

    def define_aperture(self, apid, type_spec, modifiers, command=None):
        """
        Creates the aperture for D-code ``apid``.

        :param apid: D-code, 10 or more.
        :type apid: int
        :param type_spec: "C", "R", "O", "P" or a macro name.
        :type type_spec: str
        :param modifiers: Numerical modifiers, in declared units.
        :type modifiers: list
        :param command: Raw AD command, for error reports.
        :return: The new aperture.
        """
        if apid in self.apertures:
            raise ApertureRedefined("Aperture D%d defined twice" % apid, command)

        modifiers = [float(m) for m in modifiers]

        if type_spec in STANDARD_KINDS:
            lengths = STANDARD_LENGTHS[type_spec]
            modifiers = [self.to_inches(m) if i in lengths else m for i, m in enumerate(modifiers)]
            aperture = StandardAperture(type_spec, modifiers)
        else:
            macro = self.macros.get(type_spec)
            if macro is None:
                raise MacroNotDefined("Aperture macro %s not defined" % type_spec, command)
            aperture = MacroAperture(type_spec, macro.expand(modifiers, self.to_inches, self.on_warning))

        self.apertures[apid] = aperture
        log.info("Defined aperture D%d: %s" % (apid, aperture))
        return aperture

    def lookup(self, apid, command=None):
        try:
            return self.apertures[apid]
        except KeyError:
            raise ApertureNotDefined("Aperture D%d not defined" % apid, command)
