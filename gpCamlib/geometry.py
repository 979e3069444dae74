############################################################
# FlatCAM: 2D Post-processing for Manufacturing            #
# http://flatcam.org                                       #
# Author: Juan Pablo Caram (c)                             #
# Date: 2/5/2014                                           #
# MIT Licence                                              #
############################################################

import threading
from collections import namedtuple

from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

from .errors import BoardBusy, BoardFinalized, CompositionCancelled
from .utils import setup_log

log = setup_log("gpCamlib.geometry")


DARK = 'D'
CLEAR = 'C'


DrawItem = namedtuple('DrawItem', ['geometry', 'polarity'])
DrawItem.__doc__ = """
One shape of the board. Dark items add copper, clear
items remove it from everything drawn before them.
"""


class BoardProgram:
    """
    Ordered draw items of a Gerber layer and their bounding box.
    All lengths are in inches.

    **USAGE**::

        program = BoardProgram()
        program.append(Point(0, 0).buffer(0.1), DARK)
        program.finalize()
        area = program.compose()

    """

    defaults = {
        "units": 'in'
    }

    def __init__(self):
        self.units = BoardProgram.defaults["units"]

        self.items = []

        # xmin, ymin, xmax, ymax. None until something is drawn.
        self._bounds = None

        self.finalized = False

        # Held while a composition runs.
        self._busy = threading.Lock()

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __repr__(self):
        return "<BoardProgram %d items, bounds=%s>" % (len(self.items), self._bounds)

    def append(self, geometry, polarity):
        """
        Adds a shape on top of everything drawn so far.

        :param geometry: Shapely geometry, in inches.
        :param polarity: DARK or CLEAR
        :return: The new item or None if the geometry was empty.
        :rtype: DrawItem
        """
        if self.finalized:
            raise BoardFinalized("Board program is finalized")

        if geometry is None or geometry.is_empty:
            log.debug("Skipping empty geometry.")
            return None

        gxmin, gymin, gxmax, gymax = geometry.bounds
        if self._bounds is None:
            self._bounds = (gxmin, gymin, gxmax, gymax)
        else:
            xmin, ymin, xmax, ymax = self._bounds
            self._bounds = (min(xmin, gxmin), min(ymin, gymin), max(xmax, gxmax), max(ymax, gymax))

        item = DrawItem(geometry, polarity)
        self.items.append(item)
        return item

    def finalize(self):
        """
        No more items may be added after this.
        """
        self.finalized = True

    def bounds(self):
        """
        Returns coordinates of rectangular bounds
        of geometry: (xmin, ymin, xmax, ymax).
        """
        if self._bounds is None:
            log.debug('Board program is empty')
            return 0, 0, 0, 0
        return self._bounds

    def compose(self, on_progress=None, cancelled=None):
        return compose_board_area(self, on_progress=on_progress, cancelled=cancelled)


def compose_board_area(program, on_progress=None, cancelled=None):
    """
    Combines all the draw items of ``program`` into one shape. Dark
    items are added and clear items subtracted in list order, so a
    clear item only removes what was drawn before it. Every step is
    slower than the last one as the accumulated area gets more complex.

    :param program: The board program. Finalized by this call.
    :type program: BoardProgram
    :param on_progress: Called with the completed fraction, whenever
        the integer percentage changes and after the last item.
    :param cancelled: Polled before every item, aborts the composition
        by raising ``CompositionCancelled`` when it returns True.
    :return: Shapely geometry.
    """
    if not program._busy.acquire(blocking=False):
        raise BoardBusy("A composition is already running on this board program")

    try:
        program.finalize()

        pcb = Polygon()
        total = len(program.items)
        last_done = -1

        log.debug("Composing %d items." % total)
        for count, item in enumerate(program.items, start=1):
            if cancelled is not None and cancelled():
                log.info("Composition cancelled after %d of %d items." % (count - 1, total))
                raise CompositionCancelled("Cancelled after %d of %d items" % (count - 1, total))

            if not isinstance(item.geometry, BaseGeometry):
                raise TypeError("Draw item %d is not a geometry: %r" % (count - 1, item.geometry))

            if item.polarity == DARK:
                pcb = pcb.union(item.geometry)
            else:
                pcb = pcb.difference(item.geometry)

            if on_progress is not None:
                done = count * 100 // total
                if done != last_done:
                    last_done = done
                    on_progress(float(count) / total)

        if total == 0 and on_progress is not None:
            on_progress(1.0)

        return pcb
    finally:
        program._busy.release()
