import logging
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import stats
from scipy.spatial import Delaunay, QhullError

from sierpinski_gasket import InvalidArgument, as_point, as_triangle, midpoint, to_array

logger = logging.getLogger(__name__)

# log(3) / log(2)
GASKET_DIMENSION = 1.5849625007211562


def bounding_box(vertices: Iterable) -> Tuple[float, float, float, float]:
    corners = to_array(as_triangle(vertices))
    xmin, ymin = corners.min(axis=0)
    xmax, ymax = corners.max(axis=0)
    return float(xmin), float(ymin), float(xmax), float(ymax)


def within_bounding_box(points, vertices: Iterable) -> bool:
    xmin, ymin, xmax, ymax = bounding_box(vertices)
    array = to_array(points)
    inside = ((array[:, 0] >= xmin) & (array[:, 0] <= xmax)
              & (array[:, 1] >= ymin) & (array[:, 1] <= ymax))
    return bool(np.all(inside))


def within_hull(points, vertices: Iterable) -> np.ndarray:
    """Boolean mask of the points lying in the triangle (boundary included)."""
    try:
        hull = Delaunay(to_array(as_triangle(vertices)))
    except QhullError as e:
        raise InvalidArgument(f"Vertices do not span a triangle: {e}")
    return hull.find_simplex(to_array(points)) >= 0


def recover_vertex_indices(points, vertices: Iterable) -> List[int]:
    """
    Work out which vertex produced each step of a point sequence.

    Each point after the seed must be the exact midpoint of its predecessor
    and one of the vertices.

    Returns:
        One vertex index per step (len(points) - 1 entries)
    """
    triangle = as_triangle(vertices)
    points = [as_point(p) for p in points]
    indices = []

    for step in range(1, len(points)):
        previous, current = points[step - 1], points[step]
        candidates = [i for i, v in enumerate(triangle)
                      if midpoint(previous, v) == current]
        if not candidates:
            raise ValueError(f"Point {step} {current} is not a vertex midpoint of point {step - 1}")
        indices.append(candidates[0])

    return indices


def vertex_frequencies(indices: Iterable[int]) -> np.ndarray:
    return np.bincount(np.asarray(list(indices), dtype=int), minlength=3)[:3]


def uniformity_pvalue(indices: Iterable[int]) -> float:
    """Chi-square p-value for the vertex choices being uniform over {0, 1, 2}."""
    counts = vertex_frequencies(indices)
    if counts.sum() == 0:
        raise InvalidArgument("Need at least one vertex choice")
    return float(stats.chisquare(counts).pvalue)


def box_counting_dimension(points, min_exponent: int = 1, max_exponent: int = 6) -> float:
    """
    Estimate the fractal dimension by box counting.

    The points are normalised into the unit square and covered with grids of
    2**k boxes per side for k in [min_exponent, max_exponent]. The dimension
    is the slope of log(occupied boxes) against log(2**k).
    """
    if max_exponent - min_exponent < 1:
        raise InvalidArgument("Need at least two grid scales")

    array = to_array(points)
    if len(array) == 0:
        raise InvalidArgument("Need at least one point")

    lo = array.min(axis=0)
    extent = float((array.max(axis=0) - lo).max()) or 1.0
    unit = (array - lo) / extent

    exponents = np.arange(min_exponent, max_exponent + 1)
    counts = []
    for k in exponents:
        boxes = 2 ** int(k)
        cells = np.minimum((unit * boxes).astype(int), boxes - 1)
        counts.append(len(np.unique(cells, axis=0)))

    fit = stats.linregress(exponents * np.log(2), np.log(counts))
    logger.debug(f"Box counts {counts} -> dimension {fit.slope:.3f} (r={fit.rvalue:.3f})")
    return float(fit.slope)


def to_dataframe(points, vertices: Optional[Iterable] = None) -> pd.DataFrame:
    array = to_array(points)
    df = pd.DataFrame({'x': array[:, 0], 'y': array[:, 1]})
    if vertices is not None:
        df['vertex'] = [-1] + recover_vertex_indices(points, vertices)
    return df


def _hull_fraction(points, vertices) -> Optional[float]:
    if not points:
        return 0.0
    try:
        return float(np.mean(within_hull(points, vertices)))
    except InvalidArgument:
        # flat triangle, no 2-D hull to test against
        return None


def compute_statistics(points, vertices: Iterable) -> Dict:
    points = list(points)
    array = to_array(points)
    indices = recover_vertex_indices(points, vertices)
    frequencies = vertex_frequencies(indices)

    statistics = {
        'total_points': len(points),
        'seed': [float(v) for v in array[0]] if len(array) else None,
        'bounding_box': list(bounding_box(vertices)),
        'within_bounding_box': within_bounding_box(points, vertices),
        'within_hull_fraction': _hull_fraction(points, vertices),
        'mean': [float(v) for v in array.mean(axis=0)] if len(array) else None,
        'vertex_frequencies': [int(c) for c in frequencies],
        'uniformity_pvalue': uniformity_pvalue(indices) if indices else None,
    }

    # box counting is meaningless for a handful of points
    if len(points) >= 1000:
        statistics['box_counting_dimension'] = box_counting_dimension(points)

    return statistics
