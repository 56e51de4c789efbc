from .scenario import Scenario
from .sweep import run_sweep, summarize

__all__ = ["Scenario", "run_sweep", "summarize"]
