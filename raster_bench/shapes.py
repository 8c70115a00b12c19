"""
Outline shapes for the Fill*/Stroke* shape tests.

Each outline is stored as a command string (M, L, Q, C, Z) plus a flat list
of vertices in the unit square. Curves are flattened to polygons once, and
scaled to the requested shape size on demand.
"""
from typing import Dict, List, Sequence, Tuple

from raster_bench.catalog import ShapeKind

Point = Tuple[float, float]
Polygon = List[Point]

# Segments per flattened curve
CURVE_STEPS = 8

_SHAPE_DATA: Dict[ShapeKind, Tuple[str, Tuple[float, ...]]] = {
    ShapeKind.BUTTERFLY: (
        "MCCCCCCCZ",
        (
            0.50, 0.45,
            0.35, 0.05, 0.00, 0.05, 0.05, 0.35,
            0.08, 0.50, 0.30, 0.50, 0.45, 0.50,
            0.25, 0.55, 0.05, 0.75, 0.20, 0.92,
            0.32, 1.00, 0.45, 0.80, 0.50, 0.60,
            0.55, 0.80, 0.68, 1.00, 0.80, 0.92,
            0.95, 0.75, 0.75, 0.55, 0.55, 0.50,
            0.70, 0.50, 0.92, 0.50, 0.95, 0.35,
        ),
    ),
    ShapeKind.FISH: (
        "MCLLLLCZ",
        (
            0.05, 0.50,
            0.20, 0.15, 0.55, 0.15, 0.72, 0.45,
            0.95, 0.20,
            0.88, 0.50,
            0.95, 0.80,
            0.72, 0.55,
            0.55, 0.85, 0.20, 0.85, 0.05, 0.50,
        ),
    ),
    ShapeKind.DRAGON: (
        "MQLLQLLQLQZ",
        (
            0.10, 0.80,
            0.20, 0.40, 0.40, 0.50,
            0.45, 0.30,
            0.55, 0.45,
            0.70, 0.10, 0.90, 0.20,
            0.80, 0.35,
            0.95, 0.40,
            0.75, 0.55, 0.70, 0.75,
            0.60, 0.65,
            0.45, 0.95, 0.10, 0.80,
        ),
    ),
    ShapeKind.WORLD: (
        "MCCCZMQQQZ",
        (
            0.10, 0.30,
            0.20, 0.10, 0.45, 0.15, 0.50, 0.30,
            0.55, 0.45, 0.40, 0.60, 0.30, 0.55,
            0.20, 0.50, 0.05, 0.45, 0.10, 0.30,
            0.60, 0.55,
            0.80, 0.40, 0.90, 0.60,
            0.85, 0.90, 0.65, 0.85,
            0.50, 0.75, 0.60, 0.55,
        ),
    ),
}

_flattened: Dict[ShapeKind, List[Polygon]] = {}


def _quad(p0: Point, p1: Point, p2: Point) -> Polygon:
    points = []
    for step in range(1, CURVE_STEPS + 1):
        t = step / CURVE_STEPS
        mt = 1.0 - t
        points.append((
            mt * mt * p0[0] + 2 * mt * t * p1[0] + t * t * p2[0],
            mt * mt * p0[1] + 2 * mt * t * p1[1] + t * t * p2[1],
        ))
    return points


def _cubic(p0: Point, p1: Point, p2: Point, p3: Point) -> Polygon:
    points = []
    for step in range(1, CURVE_STEPS + 1):
        t = step / CURVE_STEPS
        mt = 1.0 - t
        a, b, c, d = mt * mt * mt, 3 * mt * mt * t, 3 * mt * t * t, t * t * t
        points.append((
            a * p0[0] + b * p1[0] + c * p2[0] + d * p3[0],
            a * p0[1] + b * p1[1] + c * p2[1] + d * p3[1],
        ))
    return points


def build_polygons(commands: str, vertices: Sequence[float]) -> List[Polygon]:
    """
    Flatten a path description into a list of closed polygons.

    Args:
        commands: Path commands; M starts a subpath, L/Q/C extend it and Z
                  closes it. Unknown characters are ignored.
        vertices: Flat x, y list consumed by the commands in order.

    Returns:
        One point list per subpath.
    """
    polygons: List[Polygon] = []
    current: Polygon = []
    index = 0

    def take(count: int) -> List[Point]:
        nonlocal index
        pts = [(vertices[index + 2 * i], vertices[index + 2 * i + 1]) for i in range(count)]
        index += 2 * count
        return pts

    for cmd in commands:
        if cmd == 'M':
            if len(current) > 1:
                polygons.append(current)
            current = take(1)
        elif cmd == 'L':
            current.extend(take(1))
        elif cmd == 'Q':
            p1, p2 = take(2)
            current.extend(_quad(current[-1], p1, p2))
        elif cmd == 'C':
            p1, p2, p3 = take(3)
            current.extend(_cubic(current[-1], p1, p2, p3))
        elif cmd == 'Z':
            if len(current) > 1:
                polygons.append(current)
            current = []
    if len(current) > 1:
        polygons.append(current)
    return polygons


def base_polygons(kind: ShapeKind) -> List[Polygon]:
    """Unit-square polygons for a shape, flattened on first use."""
    polygons = _flattened.get(kind)
    if polygons is None:
        commands, vertices = _SHAPE_DATA[kind]
        polygons = build_polygons(commands, vertices)
        _flattened[kind] = polygons
    return polygons


def scaled_polygons(kind: ShapeKind, size: float) -> List[Polygon]:
    return [[(x * size, y * size) for x, y in polygon] for polygon in base_polygons(kind)]
