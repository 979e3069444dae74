############################################################
# FlatCAM: 2D Post-processing for Manufacturing            #
# http://flatcam.org                                       #
# Author: Juan Pablo Caram (c)                             #
# Date: 2/5/2014                                           #
# MIT Licence                                              #
############################################################

from numpy import cos, hypot, pi, sin
from shapely import affinity
from shapely.geometry import LineString, Point, Polygon
from shapely.geometry import box as shply_box
from shapely.ops import unary_union

from .aperture import CIRCLE, OBROUND, POLYGON, RECTANGLE, PRIM_CENTER_LINE, PRIM_CIRCLE, PRIM_OUTLINE, \
    PrimitiveInstance, StandardAperture
from .errors import UnsupportedInterpolationAperture, UnsupportedPrimitive
from .utils import arc, arc_sweep, point_angle, setup_log


log = setup_log("gpCamlib.shapes")


def circle(x, y, diameter, steps_per_circ):
    return Point(x, y).buffer(diameter / 2.0, quad_segs=max(steps_per_circ // 4, 1))


def stroke(points, width, steps_per_circ, cap_style='round'):
    """
    Thickens a polyline into a polygon. Joins are always round.

    :param points: Vertices of the path.
    :param width: Total width of the stroke.
    :param cap_style: 'round' or 'flat'
    :return: Shapely polygon, empty if there is nothing to draw.
    """
    quad_segs = max(steps_per_circ // 4, 1)

    if len(set(points)) < 2:
        # Zero length. Only round caps leave a mark.
        if cap_style == 'round':
            return Point(points[0]).buffer(width / 2.0, quad_segs=quad_segs)
        return Polygon()

    return LineString(points).buffer(width / 2.0, quad_segs=quad_segs,
                                     cap_style=cap_style, join_style='round')


####################
## Arc resolution ##
####################

def resolve_arc_center(start, stop, offset, direction, quadrant_mode):
    """
    Finds the center of a circular interpolation.

    In multi quadrant mode the offsets are signed and relative
    to the start point. In single quadrant mode they are unsigned
    and the signs are chosen from the relative position of the
    end point and the direction:

    +-----------+----------------+-----------------+
    | Direction | x0 < x1        | y0 < y1         |
    +===========+================+=================+
    | ccw       | cy = y0 + j    | cx = x0 - i     |
    |           | else y0 - j    | else x0 + i     |
    +-----------+----------------+-----------------+
    | cw        | cy = y0 - j    | cx = x0 + i     |
    |           | else y0 + j    | else x0 - i     |
    +-----------+----------------+-----------------+

    :param start: (x0, y0), current point.
    :param stop: (x1, y1), end point.
    :param offset: (i, j)
    :param direction: "cw" or "ccw"
    :param quadrant_mode: "SINGLE" or "MULTI"
    :return: (cx, cy)
    """
    x0, y0 = start
    x1, y1 = stop
    i, j = offset

    if quadrant_mode == 'MULTI':
        return x0 + i, y0 + j

    if direction == "ccw":
        cy = y0 + j if x0 < x1 else y0 - j
        cx = x0 - i if y0 < y1 else x0 + i
    else:
        cy = y0 - j if x0 < x1 else y0 + j
        cx = x0 + i if y0 < y1 else x0 - i
    return cx, cy


class ArcSpec:
    """
    Resolved circular interpolation: center, radius,
    start angle and signed sweep in degrees.
    """

    def __init__(self, start, stop, offset, direction, quadrant_mode):
        self.stop = tuple(stop)
        self.radius = float(hypot(offset[0], offset[1]))
        self.center = resolve_arc_center(start, stop, offset, direction, quadrant_mode)
        self.start_angle = point_angle(self.center, start)
        self.stop_angle = point_angle(self.center, stop)
        self.sweep = arc_sweep(self.start_angle, self.stop_angle, direction)

    def __repr__(self):
        return "<ArcSpec center=(%f, %f) r=%f start=%f sweep=%f>" % (self.center[0], self.center[1], self.radius,
                                                                     self.start_angle, self.sweep)

    def points(self, steps_per_circ):
        points = arc(self.center, self.radius, self.start_angle, self.sweep, steps_per_circ)

        # The last computed point can carry numerical errors. The
        # exact final point is the specified (x, y).
        points[-1] = self.stop
        return points


def arc_geometry(spec, steps_per_circ, filled=True, width=0.0):
    """
    Geometry of a circular interpolation outside a region.

    :param spec: Resolved arc.
    :type spec: ArcSpec
    :param filled: True for a pie wedge, False to stroke the arc
        with round caps.
    :param width: Stroke width, ignored when filled.
    :return: Shapely polygon.
    """
    if spec.radius <= 0:
        return Polygon()

    points = spec.points(steps_per_circ)

    if filled:
        if abs(spec.sweep) >= 360.0:
            return Polygon(points[:-1])
        return Polygon([spec.center] + points)

    return stroke(points, width, steps_per_circ)


#############
## Flashes ##
#############

def make_standard_flash(aperture, x, y, steps_per_circ):
    """
    :return: (geometry, hole diameter or None)
    """
    mods = aperture.modifiers

    if aperture.kind == CIRCLE:
        hole = mods[1] if len(mods) > 1 else None
        return circle(x, y, mods[0], steps_per_circ), hole

    if aperture.kind == RECTANGLE:
        width, height = mods[0], mods[1]
        hole = mods[2] if len(mods) > 2 else None
        return shply_box(x - width / 2, y - height / 2, x + width / 2, y + height / 2), hole

    if aperture.kind == OBROUND:
        width, height = mods[0], mods[1]
        hole = mods[2] if len(mods) > 2 else None
        if width > height:
            c1 = circle(x + 0.5 * (width - height), y, height, steps_per_circ)
            c2 = circle(x - 0.5 * (width - height), y, height, steps_per_circ)
        else:
            c1 = circle(x, y + 0.5 * (height - width), width, steps_per_circ)
            c2 = circle(x, y - 0.5 * (height - width), width, steps_per_circ)
        return unary_union([c1, c2]).convex_hull, hole

    if aperture.kind == POLYGON:
        radius = mods[0] / 2.0
        n_vertices = int(mods[1])
        rotation = mods[2] if len(mods) > 2 else 0.0
        hole = mods[3] if len(mods) > 3 else None
        points = []
        for i in range(n_vertices):
            theta = (rotation + 360.0 * i / n_vertices) * pi / 180
            points.append((float(x + radius * cos(theta)), float(y + radius * sin(theta))))
        return Polygon(points), hole

    raise UnsupportedPrimitive("Unknown aperture type %s" % aperture.kind)


def make_circle(mods):
    """

    :param mods: (Exposure 0/1, Diameter >=0, X-coord, Y-coord, rotation)
    :return: (geometry, rotation)
    """
    _, dia, x, y, angle = mods[:5]
    return Point(x, y).buffer(dia / 2), angle


def make_centerline(mods):
    """

    :param mods: (Exposure 0/1, width >=0, height >=0, x-center, y-center,
        rotation angle around origin in degrees)
    :return: (geometry, rotation)
    """
    _, width, height, x, y, angle = mods[:6]
    return shply_box(x - width / 2, y - height / 2, x + width / 2, y + height / 2), angle


def make_outline(mods):
    """

    :param mods: (Exposure 0/1, n, x0, y0, ... xn, yn, rotation). The
        last point repeats the first one.
    :return: (geometry, rotation)
    """
    n = int(mods[1])
    points = [(mods[2 * i + 2], mods[2 * i + 3]) for i in range(n + 1)]
    angle = mods[2 * n + 4]
    return Polygon(points), angle


primitive_makers = {
    PRIM_CIRCLE: make_circle,
    PRIM_CENTER_LINE: make_centerline,
    PRIM_OUTLINE: make_outline
}


def make_primitive_flash(primitive, x, y):
    """
    Places a macro primitive at (x, y). Macro rotations are
    clockwise, so the shape turns by 360 - rotation around the
    macro origin before being moved into place.

    :return: (geometry, None)
    """
    maker = primitive_makers.get(primitive.code)
    if maker is None:
        raise UnsupportedPrimitive("Macro primitive %s not supported" % primitive.name,
                                   str(list(primitive.params)))

    geo, angle = maker(list(primitive.params))
    geo = affinity.rotate(geo, 360 - angle, origin=(0, 0))
    return affinity.translate(geo, xoff=x, yoff=y), None


def flash_geometry(element, x, y, steps_per_circ):
    """
    Shape of an aperture element stamped at (x, y).

    :param element: StandardAperture or PrimitiveInstance.
    :return: (geometry, hole diameter or None)
    """
    log.debug('Flashing @(%f, %f), Aperture: %s' % (x, y, element))

    if isinstance(element, StandardAperture):
        return make_standard_flash(element, x, y, steps_per_circ)

    if isinstance(element, PrimitiveInstance):
        return make_primitive_flash(element, x, y)

    raise UnsupportedPrimitive("Cannot flash %s" % element)


###################
## Interpolation ##
###################

def interpolation_geometry(element, start, stop, steps_per_circ):
    """
    Shapes swept by an aperture along a straight line. Only circles
    and rectangles may draw. A rectangle is approximated by a
    flat-capped stroke as wide as its diagonal plus the rectangle at
    both ends.

    :return: List of shapely polygons.
    """
    if isinstance(element, StandardAperture) and element.kind == CIRCLE:
        return [stroke([start, stop], element.modifiers[0], steps_per_circ)]

    if isinstance(element, StandardAperture) and element.kind == RECTANGLE:
        width, height = element.modifiers[0], element.modifiers[1]
        diam = float(hypot(width, height))
        return [
            stroke([start, stop], diam, steps_per_circ, cap_style='flat'),
            shply_box(start[0] - width / 2, start[1] - height / 2, start[0] + width / 2, start[1] + height / 2),
            shply_box(stop[0] - width / 2, stop[1] - height / 2, stop[0] + width / 2, stop[1] + height / 2)
        ]

    raise UnsupportedInterpolationAperture("Cannot interpolate with aperture %s" % (element,))
