import logging
from datetime import datetime

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from gasket_analysis import GASKET_DIMENSION, box_counting_dimension, recover_vertex_indices, uniformity_pvalue
from gasket_display import DisplayMode, GasketPlotter, plot_density
from gasket_store import GasketDataManager

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def analyze_run_statistics(points, metadata):
    stats = {
        'total_points': len(points),
        'xmin': float(np.min(points[:, 0])) if len(points) else 0.0,
        'xmax': float(np.max(points[:, 0])) if len(points) else 0.0,
        'ymin': float(np.min(points[:, 1])) if len(points) else 0.0,
        'ymax': float(np.max(points[:, 1])) if len(points) else 0.0,
        'unique_points': len(np.unique(points, axis=0)) if len(points) else 0,
    }

    vertices = metadata.get('vertices')
    if vertices and len(points) > 1:
        indices = recover_vertex_indices(points, vertices)
        stats['vertex_frequencies'] = np.bincount(indices, minlength=3).tolist()
        stats['uniformity_pvalue'] = uniformity_pvalue(indices)
    if len(points) >= 1000:
        stats['box_counting_dimension'] = box_counting_dimension(points)

    print("\n📊 RUN STATISTICS:")
    print(f"Total points: {stats['total_points']:,}")
    print(f"Unique points: {stats['unique_points']:,}")
    print(f"x range: {stats['xmin']:.4f} - {stats['xmax']:.4f}")
    print(f"y range: {stats['ymin']:.4f} - {stats['ymax']:.4f}")
    if 'vertex_frequencies' in stats:
        print(f"Vertex choices: {stats['vertex_frequencies']} (uniformity p={stats['uniformity_pvalue']:.3f})")
    if 'box_counting_dimension' in stats:
        print(f"Box-counting dimension: {stats['box_counting_dimension']:.3f} (gasket: {GASKET_DIMENSION:.3f})")

    return stats


def create_gasket_visualizations(points, metadata, output_prefix="gasket_viz"):
    print("\n🎨 Creating gasket visualizations...")
    written = []

    plotter = GasketPlotter(mode=DisplayMode.BUFFERED)
    plotter.show(points)
    plotter.save(f'{output_prefix}_scatter.png')
    written.append(f'{output_prefix}_scatter.png')
    plt.close(plotter.ax.figure)

    ax = plot_density(points)
    ax.figure.savefig(f'{output_prefix}_density.png', dpi=300, bbox_inches='tight')
    written.append(f'{output_prefix}_density.png')
    plt.close(ax.figure)

    vertices = metadata.get('vertices')
    if vertices and len(points) > 1:
        indices = recover_vertex_indices(points, vertices)
        fig, ax = plt.subplots(figsize=(7, 5))
        sns.histplot(indices, discrete=True, stat="probability", ax=ax)
        ax.axhline(1 / 3, color='red', linestyle='--', label='uniform')
        ax.set_xticks([0, 1, 2])
        ax.set_xlabel('Vertex index')
        ax.set_title('Sierpinski Gasket: Vertex Choices')
        ax.legend()
        fig.savefig(f'{output_prefix}_vertices.png', dpi=300, bbox_inches='tight')
        written.append(f'{output_prefix}_vertices.png')
        plt.close(fig)

    for path in written:
        print(f"✅ Saved: {path}")
    return written


def main(data_dir="gasket_data"):
    try:
        print("🔬 Sierpinski Gasket Analysis and Visualization")
        print("=" * 60)

        data_mgr = GasketDataManager(data_dir)
        run_dir = data_mgr.latest_run_dir()
        print(f"📂 Using latest run: {run_dir.name}")
        points, metadata = data_mgr.load_run(run_dir)

        stats = analyze_run_statistics(points, metadata)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_prefix = f"gasket_viz_{timestamp}"
        create_gasket_visualizations(points, metadata, output_prefix)

        print(f"\n✅ Visualization complete!")
        print(f"📁 Output files: {output_prefix}_*.png")

        return points, stats

    except Exception as e:
        logger.exception(f"❌ Error: {e}")
        return None, None


if __name__ == "__main__":
    main()
