############################################################
# FlatCAM: 2D Post-processing for Manufacturing            #
# http://flatcam.org                                       #
# Author: Juan Pablo Caram (c)                             #
# Date: 2/5/2014                                           #
# MIT Licence                                              #
############################################################


class GerberParseError(Exception):
    """
    Fatal condition. Stops the parse pass.

    :param message: Human readable description.
    :param command: Raw text of the offending command, if known.
    :param position: Index of the offending token, if known.
    """

    def __init__(self, message, command=None, position=None):
        Exception.__init__(self, message)
        self.message = message
        self.command = command
        self.position = position

    def __str__(self):
        if self.command is None:
            return self.message
        if self.position is None:
            return "%s: %s" % (self.message, self.command)
        return "%s (token %d): %s" % (self.message, self.position, self.command)


class MalformedNumber(GerberParseError, ValueError):
    pass


class ApertureNotDefined(GerberParseError):
    pass


class ApertureRedefined(GerberParseError):
    pass


class MacroNotDefined(GerberParseError):
    pass


class UnterminatedExtendedBlock(GerberParseError):
    pass


class GerberWarning(Exception):
    """
    Non-fatal condition. Collected by the parser and
    logged, never raised out of a parse.
    """

    def __init__(self, message, command=None, position=None):
        Exception.__init__(self, message)
        self.message = message
        self.command = command
        self.position = position

    def __str__(self):
        if self.command is None:
            return self.message
        return "%s: %s" % (self.message, self.command)


class UnsupportedPrimitive(GerberWarning):
    pass


class UnsupportedMacroEquation(GerberWarning):
    pass


class UnsupportedInterpolationAperture(GerberWarning):
    pass


class UnknownCommand(GerberWarning):
    pass


class BoardBusy(Exception):
    pass


class BoardFinalized(Exception):
    pass


class CompositionCancelled(Exception):
    pass
