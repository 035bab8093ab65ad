"""
Core package init for bubbletrack.

Tracks faces across detection cycles and maps them onto fixed display slots.
"""

__all__ = [
    "config",
    "detectors",
    "io_utils",
    "session",
    "slots",
    "summary",
    "tracking",
    "types",
    "viz",
]
