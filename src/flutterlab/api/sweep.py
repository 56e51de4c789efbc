"""
Parameter sweeps over independent sheet drops.

Each configuration gets its own driver and state inside a worker process;
nothing is shared between runs.
"""
from __future__ import annotations

import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Sequence

import numpy as np
import pandas as pd

from flutterlab.core.config import SimulationConfig
from flutterlab.core.records import SimulationResult
from flutterlab.core.simulation import SimulationDriver


def _run_single(index: int, config: SimulationConfig) -> tuple[int, SimulationResult]:
    driver = SimulationDriver.from_config(config)
    return index, driver.run(log_interval=0)


def run_sweep(
    configs: Sequence[SimulationConfig],
    n_processes: int | None = None,
    raise_on_error: bool = True,
) -> list[SimulationResult | None]:
    """
    Run independent configurations, in parallel when possible.

    Parameters
    ----------
    configs : Sequence[SimulationConfig]
        One configuration per run
    n_processes : int | None
        Worker processes. None uses os.cpu_count(); 1 runs serially in this
        process.
    raise_on_error : bool
        If True, the first failing run's exception propagates. If False,
        failures are reported and their slot in the output is None.

    Returns
    -------
    list[SimulationResult | None]
        Results in the same order as ``configs``
    """
    n = len(configs)
    if n == 0:
        return []
    if n_processes is None:
        n_processes = min(os.cpu_count() or 1, n)

    results: list[SimulationResult | None] = [None] * n
    print(f"[Sweep] Running {n} simulations on {n_processes} process(es)")

    if n_processes <= 1:
        for i, cfg in enumerate(configs):
            try:
                _, results[i] = _run_single(i, cfg)
            except Exception as e:
                if raise_on_error:
                    raise
                print(f"[Sweep] Run {i} failed: {e}")
        return results

    with ProcessPoolExecutor(max_workers=n_processes) as executor:
        futures = {executor.submit(_run_single, i, cfg): i for i, cfg in enumerate(configs)}
        completed = 0
        for future in as_completed(futures):
            i = futures[future]
            try:
                _, results[i] = future.result()
            except Exception as e:
                if raise_on_error:
                    raise
                print(f"[Sweep] Run {i} failed: {e}")
            completed += 1
            if completed % 10 == 0:
                print(f"[Sweep] Completed {completed}/{n} simulations")

    print(f"[Sweep] Completed {sum(r is not None for r in results)} out of {n} simulations")
    return results


def summarize(results: Sequence[SimulationResult | None]) -> pd.DataFrame:
    """
    One row per run: termination, final position and aerodynamic extremes.

    Failed runs (None) appear as rows with reason "failed" and NaN values.
    """
    rows = []
    for i, res in enumerate(results):
        if res is None:
            rows.append({"run": i, "reason": "failed", "steps": 0,
                         "terminal_time": np.nan, "touchdown_time": np.nan,
                         "final_x": np.nan, "final_y": np.nan, "final_z": np.nan,
                         "max_reynolds": np.nan, "mean_projected_area": np.nan})
            continue
        row = {"run": i}
        row.update(res.summary())
        if row["touchdown_time"] is None:
            row["touchdown_time"] = np.nan
        rows.append(row)
    return pd.DataFrame(rows)
