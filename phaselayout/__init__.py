"""
PhaseLayout - intersection layout editor.

Annotates a background image with phase lines, detectors and text labels
and exports them as a compact layout text file.
"""

__version__ = "0.1.0"
