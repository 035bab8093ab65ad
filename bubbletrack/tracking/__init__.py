"""Track association across detection cycles."""

from bubbletrack.tracking.centroid import CentroidTracker, update_tracks

__all__ = ["CentroidTracker", "update_tracks"]
