"""
PhaseLayout UI Dialogs

Dialog windows:
- TextEditDialog: Text annotation label, text and colour
- PickDialog: Phase/detector name selection
- QtModalResponder: Answers editor requests with the dialogs above
"""

from .text_dialog import TextEditDialog
from .pick_dialog import PickDialog
from .responder import QtModalResponder

__all__ = [
    'TextEditDialog',
    'PickDialog',
    'QtModalResponder',
]
