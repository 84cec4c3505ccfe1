"""Run tasks in parallel on a single machine.

Work happens in external programs, so samples fan out over threads which
each block on their own subprocess.
"""
import joblib

from readqc.log import logger

def run_multicore(fn, items, num_cores=1, label=None):
    """Run the function over all items, returning results in input order.

    Returns only once every item finishes, giving a barrier between stages.
    """
    items = [x for x in items if x is not None]
    if len(items) == 0:
        return []
    num_jobs = max(1, min(int(num_cores), len(items)))
    if num_jobs == 1:
        return [fn(*x) for x in items]
    logger.debug("threading: %s over %s samples with %s jobs" %
                 (label or fn.__name__, len(items), num_jobs))
    return list(joblib.Parallel(n_jobs=num_jobs, batch_size=1, backend="threading")(
        joblib.delayed(fn)(*x) for x in items))
