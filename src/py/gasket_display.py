"""
Plotting collaborator for gasket point sequences.

The three display modes differ only in what is kept between draws:

- IMMEDIATE: each point is drawn as it is computed and then forgotten, so
  there is nothing to redraw.
- RETAINED: the point sequence is kept; every redraw rebuilds the coordinate
  arrays from it.
- BUFFERED: the sequence is converted into one array when it is shown and
  that array is reused by every redraw.
"""

import logging
from enum import Enum, auto
from typing import Iterable, Optional

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from sierpinski_gasket import iter_points, to_array

logger = logging.getLogger(__name__)


class DisplayMode(Enum):
    IMMEDIATE = auto()
    RETAINED = auto()
    BUFFERED = auto()


def rotation(theta: float) -> np.ndarray:
    c, s = np.cos(theta), np.sin(theta)
    return np.array([[c, -s], [s, c]])


class GasketPlotter:

    def __init__(self, mode: DisplayMode = DisplayMode.RETAINED, ax=None,
                 marker_size: float = 0.5, color: str = 'navy'):
        self.mode = mode
        if ax is None:
            _, ax = plt.subplots(figsize=(8, 8))
        self.ax = ax
        self.marker_size = marker_size
        self.color = color

        self.draw_calls = 0
        self.uploads = 0
        self._points = None
        self._buffer = None

    @property
    def retained(self) -> bool:
        return self._points is not None or self._buffer is not None

    def _upload(self, points) -> np.ndarray:
        self.uploads += 1
        return to_array(points)

    def _scatter(self, array: np.ndarray):
        self.draw_calls += 1
        self.ax.scatter(array[:, 0], array[:, 1], s=self.marker_size, c=self.color,
                        marker='.', linewidths=0)

    def _finish_axes(self):
        self.ax.set_aspect('equal')
        self.ax.set_title(f'Sierpinski Gasket ({self.mode.name.lower()} mode)')

    def stream(self, vertices: Iterable, count: int, seed_point, random_state=None) -> int:
        """
        Draw points straight from the generator without keeping them.

        Returns:
            Number of points drawn
        """
        drawn = 0
        for point in iter_points(vertices, count, seed_point, random_state=random_state):
            self.draw_calls += 1
            self.ax.plot(point.x, point.y, ',', color=self.color)
            drawn += 1

        self._finish_axes()
        logger.debug(f"Streamed {drawn} points")
        return drawn

    def show(self, points):
        points = list(points)

        if self.mode is DisplayMode.IMMEDIATE:
            self._scatter(self._upload(points))
        elif self.mode is DisplayMode.RETAINED:
            self._points = points
            self._scatter(self._upload(self._points))
        else:
            self._buffer = self._upload(points)
            self._scatter(self._buffer)

        self._finish_axes()
        logger.info(f"Displayed {len(points)} points in {self.mode.name} mode")

    def redraw(self, matrix: Optional[np.ndarray] = None, offset: Optional[Iterable[float]] = None):
        """
        Clear the axes and draw the retained geometry again.

        Args:
            matrix: Optional 2x2 linear map applied to every point
            offset: Optional (dx, dy) added after the linear map
        """
        if self.mode is DisplayMode.IMMEDIATE or not self.retained:
            raise RuntimeError(f"Nothing retained to redraw in {self.mode.name} mode")

        if self.mode is DisplayMode.RETAINED:
            array = self._upload(self._points)
        else:
            array = self._buffer

        if matrix is not None:
            matrix = np.asarray(matrix, dtype=float)
            if matrix.shape != (2, 2):
                raise ValueError(f"Transform matrix has wrong shape: {matrix.shape}, expected (2, 2)")
            array = array @ matrix.T
        if offset is not None:
            array = array + np.asarray(offset, dtype=float)

        self.ax.cla()
        self._scatter(array)
        self._finish_axes()
        return array

    def save(self, path, dpi: int = 300):
        self.ax.figure.savefig(path, dpi=dpi, bbox_inches='tight')
        logger.info(f"Saved: {path}")


def plot_density(points, bins: int = 128, ax=None):
    """Heatmap of how often the walk visits each cell of a bins x bins grid."""
    array = to_array(points)
    if ax is None:
        _, ax = plt.subplots(figsize=(9, 8))

    counts, _, _ = np.histogram2d(array[:, 0], array[:, 1], bins=bins)
    # rows are y, top row is the highest y
    sns.heatmap(np.flipud(counts.T), ax=ax, cmap='viridis', square=True,
                xticklabels=False, yticklabels=False, cbar_kws={'label': 'Visits'})
    ax.set_title('Sierpinski Gasket: Visit Density')
    return ax
