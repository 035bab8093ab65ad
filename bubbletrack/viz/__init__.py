"""Renderer-side helpers: crop geometry, smoothing and OpenCV compositing."""
