"""
Release-angle sweep: how far does a sheet glide before landing?

Runs one drop per initial pitch in parallel and tabulates the outcome.
"""
import sys
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from flutterlab.api.sweep import run_sweep, summarize
from flutterlab.core.config import SimulationConfig
from flutterlab.dynamics.body import RigidBodyState, sheet_from_preset
from flutterlab.utils.orientation import orientation_from_euler


def main():
    body = sheet_from_preset("a4_paper")
    pitches = np.arange(0, 90, 10)
    configs = [
        SimulationConfig(
            body=body,
            initial_state=RigidBodyState(
                [0.0, 0.0, 2.0], orientation=orientation_from_euler(pitch=p, roll=3)
            ),
            dt=1e-3,
            duration=15.0,
        )
        for p in pitches
    ]

    df = summarize(run_sweep(configs))
    df.insert(1, "pitch_deg", pitches)
    df["glide"] = np.hypot(df["final_x"], df["final_y"])
    print(df[["pitch_deg", "reason", "terminal_time", "glide", "max_reynolds"]].to_string(index=False))


if __name__ == "__main__":
    main()
