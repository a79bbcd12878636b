import logging
import multiprocessing
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Iterable, List, Optional, Sequence

from sierpinski_gasket import InvalidArgument, PointSequence, as_count, as_point, as_triangle, generate

logger = logging.getLogger(__name__)


def generate_worker(vertices, count, seed_point, random_state):
    return generate(vertices, count, seed_point, random_state=random_state)


def generate_batch(vertices: Iterable, count: int, seeds: Sequence,
                   random_states: Optional[Sequence] = None,
                   max_workers: Optional[int] = None) -> List[PointSequence]:
    """
    Generate one independent point sequence per seed in worker processes.

    Args:
        vertices: The 3 reference vertices shared by every sequence
        count: Points per sequence after the seed
        seeds: One seed point per sequence
        random_states: Optional per-sequence random states (same length as seeds)
        max_workers: Process count, defaults to min(cpu_count, 8)

    Returns:
        Sequences in the same order as seeds
    """
    triangle = as_triangle(vertices)
    count = as_count(count)
    seeds = [as_point(s) for s in seeds]
    if random_states is None:
        random_states = [None] * len(seeds)
    elif len(random_states) != len(seeds):
        raise InvalidArgument(
            f"Got {len(random_states)} random states for {len(seeds)} seeds"
        )
    if not seeds:
        return []

    if max_workers is None:
        max_workers = min(multiprocessing.cpu_count(), 8)

    logger.info(f"Starting batch generation: {len(seeds)} sequences, {max_workers} workers")

    results = [None] * len(seeds)
    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(generate_worker, triangle, count, seed, state): i
            for i, (seed, state) in enumerate(zip(seeds, random_states))
        }

        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                results[index] = future.result()
            except Exception as e:
                logger.error(f"Sequence {index} failed: {e}")
                raise
            logger.debug(f"Sequence {index} complete ({len(results[index])} points)")

    return results
