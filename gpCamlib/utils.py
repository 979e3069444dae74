############################################################
# FlatCAM: 2D Post-processing for Manufacturing            #
# http://flatcam.org                                       #
# Author: Juan Pablo Caram (c)                             #
# Date: 2/5/2014                                           #
# MIT Licence                                              #
############################################################

import logging

from numpy import arctan2, ceil, cos, degrees, radians, sin


LOG_FORMAT = '[%(levelname)s] %(message)s'


def setup_log(name:str) -> logging.Logger:
    log = logging.getLogger(name)
    log.setLevel(logging.INFO)
    # log.setLevel(logging.DEBUG)
    # log.setLevel(logging.WARNING)
    if not log.handlers:
        formatter = logging.Formatter(LOG_FORMAT)
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        log.addHandler(handler)
    return log


def set_log_level(level):
    """
    Changes the level of every ``gpCamlib`` logger created
    with ``setup_log()``.

    :param level: A ``logging`` level, e.g. ``logging.DEBUG``.
    :return: None
    """
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("gpCamlib"):
            logging.getLogger(name).setLevel(level)


def point_angle(center, point):
    """
    Angle of ``point`` seen from ``center``, in degrees
    in the range [0, 360).
    """
    angle = float(degrees(arctan2(point[1] - center[1], point[0] - center[0])))
    return angle % 360.0


def arc_sweep(start, stop, direction:str):
    """
    Signed sweep in degrees going from the ``start`` angle to the ``stop``
    angle. Counterclockwise sweeps are positive, clockwise sweeps negative.
    Equal angles mean a complete circle, never an empty arc.

    :param start: Start angle in degrees.
    :param stop: Stop angle in degrees.
    :param direction: "cw" or "ccw"
    :return: Sweep in degrees, in (0, 360] for "ccw" and [-360, 0) for "cw".
    :rtype: float
    """
    if direction == "ccw":
        sweep = (stop - start) % 360.0
        return sweep if sweep != 0 else 360.0
    sweep = (start - stop) % 360.0
    return -sweep if sweep != 0 else -360.0


def arc(center, radius, start, sweep, steps_per_circ):
    """
    Creates a list of point along the specified arc.

    :param center: Coordinates of the center [x, y]
    :type center: list
    :param radius: Radius of the arc.
    :type radius: float
    :param start: Starting angle in degrees
    :type start: float
    :param sweep: Signed angle to travel in degrees, positive is
        counterclockwise.
    :type sweep: float
    :param steps_per_circ: Number of straight line segments to
        represent a circle.
    :type steps_per_circ: int
    :return: The desired arc, as list of tuples
    :rtype: list
    """
    steps = max([int(ceil(abs(sweep) / 360.0 * steps_per_circ)), 2])
    delta_angle = radians(sweep) / steps
    start = radians(start)
    points = []
    for i in range(steps + 1):
        theta = start + delta_angle * i
        points.append((float(center[0] + radius * cos(theta)),
                       float(center[1] + radius * sin(theta))))
    return points
