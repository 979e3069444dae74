############################################################
# FlatCAM: 2D Post-processing for Manufacturing            #
# http://flatcam.org                                       #
# Author: Juan Pablo Caram (c)                             #
# Date: 2/5/2014                                           #
# MIT Licence                                              #
############################################################

import re


EXTENDED = '%'

# '%' is kept as a token, '*' only terminates a command.
split_re = re.compile(r'(%)|\*')


def tokenize(text):
    """
    Splits Gerber source into commands. Line breaks carry no
    meaning in Gerber and are removed first.

    The following source::

        %FSLAX24Y24*%
        G54D11*G36*

    becomes ``['%', 'FSLAX24Y24', '%', 'G54D11', 'G36']``.

    :param text: Gerber source.
    :type text: str
    :return: Ordered list of tokens.
    :rtype: list
    """
    text = text.replace('\r', '').replace('\n', '')
    return [token for token in split_re.split(text) if token]


class TokenCursor:
    """
    Position carrying view over a token list.
    """

    def __init__(self, tokens, position=0):
        self.tokens = list(tokens)
        self.position = position

    def at_end(self):
        return self.position >= len(self.tokens)

    def peek(self):
        if self.at_end():
            return None
        return self.tokens[self.position]

    def advance(self):
        """
        Returns the current token and moves past it.
        """
        token = self.peek()
        if token is not None:
            self.position += 1
        return token

    def take_until(self, marker):
        """
        Consumes tokens up to, but not including, ``marker``.

        :return: The consumed tokens.
        :rtype: list
        """
        taken = []
        while not self.at_end() and self.peek() != marker:
            taken.append(self.advance())
        return taken
