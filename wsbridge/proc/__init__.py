"""Child process handle."""

from .child import ChildProcess, ProcessState

__all__ = ["ChildProcess", "ProcessState"]
