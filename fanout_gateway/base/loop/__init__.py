"""Cooperative loop primitive."""

from .cooperative_loop import CooperativeLoop, WorkUnit, WorkUnits
from .loop_report import LoopReport

__all__ = ["CooperativeLoop", "LoopReport", "WorkUnit", "WorkUnits"]
