"""
Screen question scanner.
"""
from .controller import ScanLoopController, ScanSnapshot, ScanState

__all__ = ["ScanLoopController", "ScanSnapshot", "ScanState"]
