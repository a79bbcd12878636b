import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np

from gasket_analysis import compute_statistics, to_dataframe

logger = logging.getLogger(__name__)


class GasketDataManager:

    def __init__(self, output_dir="gasket_data"):
        self.output_dir = Path(output_dir)

    def save_run(self, points, metadata: Dict, vertices=None) -> Path:
        """
        Save a point sequence and its metadata into a new run directory.

        Args:
            points: The generated point sequence
            metadata: JSON-serialisable run description
            vertices: Triangle vertices, enables the statistics file

        Returns:
            Path to the saved .npy file
        """
        points = list(points)

        # everything that can fail runs before the run directory exists
        df = to_dataframe(points, vertices)
        statistics = compute_statistics(points, vertices) if vertices is not None else None
        metadata_text = json.dumps(metadata, indent=2)
        statistics_text = json.dumps(statistics, indent=2) if statistics is not None else None

        self.output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        base_name = f"gasket_{timestamp}"

        run_dir = self.output_dir / f"run_{timestamp}"
        run_dir.mkdir(exist_ok=True)

        points_file = run_dir / f"{base_name}.npy"
        np.save(points_file, df[['x', 'y']].to_numpy())

        csv_file = run_dir / f"{base_name}.csv"
        df.to_csv(csv_file, index=False, float_format='%.17g')

        meta_file = run_dir / f"{base_name}_metadata.json"
        with open(meta_file, 'w') as f:
            f.write(metadata_text)

        if statistics_text is not None:
            stats_file = run_dir / f"{base_name}_statistics.json"
            with open(stats_file, 'w') as f:
                f.write(statistics_text)

        logger.info(f"Run saved: {points_file}")
        return points_file

    def latest_run_dir(self) -> Path:
        if not self.output_dir.exists():
            raise FileNotFoundError(f"No {self.output_dir} directory found")

        run_dirs = [d for d in self.output_dir.iterdir() if d.is_dir() and d.name.startswith("run_")]
        if not run_dirs:
            raise FileNotFoundError(f"No run directories found in {self.output_dir}")

        return max(run_dirs, key=lambda d: (d.stat().st_mtime, d.name))

    def load_run(self, run_dir: Optional[Path] = None) -> Tuple[np.ndarray, Dict]:
        run_dir = Path(run_dir) if run_dir is not None else self.latest_run_dir()

        npy_files = sorted(run_dir.glob("*.npy"))
        if not npy_files:
            raise FileNotFoundError(f"No .npy files found in {run_dir}")
        points = np.load(npy_files[0])

        metadata = {}
        meta_files = sorted(run_dir.glob("*_metadata.json"))
        if meta_files:
            with open(meta_files[0], 'r') as f:
                metadata = json.load(f)
        else:
            logger.warning(f"No metadata file in {run_dir}")

        logger.info(f"Loaded {len(points)} points from {npy_files[0]}")
        return points, metadata
