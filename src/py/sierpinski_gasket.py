"""
Sierpinski gasket point generator.

Approximates the gasket with the random midpoint walk: start from a seed,
repeatedly pick one of the three triangle vertices at random and move halfway
towards it.
"""

import logging
import operator
from typing import Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class Point2D(NamedTuple):
    x: float
    y: float


Triangle = Tuple[Point2D, Point2D, Point2D]
PointSequence = List[Point2D]

DEFAULT_VERTICES: Triangle = (Point2D(-1.0, -1.0), Point2D(0.0, 1.0), Point2D(1.0, -1.0))
DEFAULT_COUNT = 5000


class InvalidArgument(ValueError):
    pass


def add(a: Point2D, b: Point2D) -> Point2D:
    return Point2D(a.x + b.x, a.y + b.y)


def scale(p: Point2D, s: float) -> Point2D:
    return Point2D(p.x * s, p.y * s)


def midpoint(a: Point2D, b: Point2D) -> Point2D:
    return Point2D((a.x + b.x) / 2, (a.y + b.y) / 2)


def as_point(value) -> Point2D:
    try:
        x, y = value
        return Point2D(float(x), float(y))
    except (TypeError, ValueError):
        raise InvalidArgument(f"Expected an (x, y) pair of numbers, got {value!r}")


def as_triangle(vertices: Iterable) -> Triangle:
    try:
        vertices = list(vertices)
    except TypeError:
        raise InvalidArgument(f"Vertices must be a sequence of 3 points, got {vertices!r}")
    if len(vertices) != 3:
        raise InvalidArgument(f"Expected exactly 3 vertices, got {len(vertices)}")
    return tuple(as_point(v) for v in vertices)


def as_count(count) -> int:
    if isinstance(count, bool):
        raise InvalidArgument(f"Point count must be an integer, got {count!r}")
    try:
        count = operator.index(count)
    except TypeError:
        raise InvalidArgument(f"Point count must be an integer, got {count!r}")
    if count < 0:
        raise InvalidArgument(f"Point count must be >= 0, got {count}")
    return count


def resolve_rng(random_state=None) -> np.random.Generator:
    """None, an int seed or an existing numpy Generator."""
    try:
        return np.random.default_rng(random_state)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Random state must be None, a non-negative integer or a numpy Generator, got {random_state!r}")


def _vertex_choices(count: int, random_state=None,
                    vertex_indices: Optional[Sequence[int]] = None) -> Sequence[int]:
    if vertex_indices is None:
        rng = resolve_rng(random_state)
        return rng.integers(0, 3, size=count).tolist()

    indices = list(vertex_indices)[:count]
    if len(indices) < count:
        raise InvalidArgument(f"Need {count} vertex indices, got {len(indices)}")
    for i, index in enumerate(indices):
        try:
            indices[i] = operator.index(index)
        except TypeError:
            indices[i] = None
        if indices[i] not in (0, 1, 2):
            raise InvalidArgument(f"Vertex index at step {i} must be 0, 1 or 2, got {index!r}")
    return indices


def edge_midpoint_seed(vertices: Iterable) -> Point2D:
    """Midpoint of the midpoints of edges v0-v1 and v0-v2."""
    v0, v1, v2 = as_triangle(vertices)
    return midpoint(midpoint(v0, v1), midpoint(v0, v2))


def random_interior_seed(vertices: Iterable, random_state=None) -> Point2D:
    """
    Uniformly random point inside the triangle.

    Draws barycentric weights (u, v) on the unit square and folds the upper
    half back into the triangle.
    """
    v0, v1, v2 = as_triangle(vertices)
    rng = resolve_rng(random_state)
    u, v = rng.random(2)
    if u + v > 1:
        u, v = 1 - u, 1 - v
    e1 = add(v1, scale(v0, -1))
    e2 = add(v2, scale(v0, -1))
    return add(v0, add(scale(e1, float(u)), scale(e2, float(v))))


def iter_points(vertices: Iterable, count: int, seed_point, random_state=None,
                vertex_indices: Optional[Sequence[int]] = None) -> Iterator[Point2D]:
    """
    Lazily yield the seed followed by `count` midpoint-walk points.

    Arguments are validated before the first point is yielded, so a bad call
    fails at the call site rather than on first iteration.
    """
    triangle = as_triangle(vertices)
    count = as_count(count)
    current = as_point(seed_point)
    choices = _vertex_choices(count, random_state, vertex_indices)

    def walk():
        nonlocal current
        yield current
        for index in choices:
            current = midpoint(current, triangle[index])
            yield current

    return walk()


def generate(vertices: Iterable, count: int, seed_point, random_state=None,
             vertex_indices: Optional[Sequence[int]] = None) -> PointSequence:
    """
    Generate a gasket point sequence.

    Args:
        vertices: The 3 reference vertices
        count: Number of points to produce after the seed (>= 0)
        seed_point: First element of the output
        random_state: None, an int seed or a numpy Generator
        vertex_indices: Explicit vertex choices, overriding random_state

    Returns:
        List of count + 1 points, seed first
    """
    points = list(iter_points(vertices, count, seed_point, random_state, vertex_indices))
    logger.debug(f"Generated {len(points)} points from seed {points[0]}")
    return points


def to_array(points: Iterable) -> np.ndarray:
    array = np.asarray([tuple(p) for p in points], dtype=float)
    return array.reshape(-1, 2)
