"""
PhaseLayout Dock Panels
"""

from .names_panel import NamesPanel, NameListWidget
from .counts_panel import CountsPanel

__all__ = ['NamesPanel', 'NameListWidget', 'CountsPanel']
