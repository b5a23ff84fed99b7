"""
PhaseLayout UI Module

User interface components:
- MainWindow: Primary application window
- Canvas: Image and layout drawing surface
- Panels: Name lists and placement counts
- Dialogs: Text label, name pick and the Qt modal responder
"""
