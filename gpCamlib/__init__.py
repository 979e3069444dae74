############################################################
# FlatCAM: 2D Post-processing for Manufacturing            #
# http://flatcam.org                                       #
# Author: Juan Pablo Caram (c)                             #
# Date: 2/5/2014                                           #
# MIT Licence                                              #
############################################################

__version__ = '0.3.0'

from .errors import GerberParseError, GerberWarning
from .geometry import BoardProgram, DrawItem, compose_board_area, DARK, CLEAR
from .gerber import Gerber
from .tokens import tokenize
