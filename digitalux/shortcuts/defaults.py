"""Compiled-in default key bindings, in dialog display order.

Action ids are a public contract with the host's action dispatch: renaming
one orphans any saved override for it.
"""

from __future__ import annotations

DEFAULT_SHORTCUTS: list[tuple[str, str, str]] = [
    # File
    ("file.new", "New File", "Ctrl+N"),
    ("file.open", "Open File", "Ctrl+O"),
    ("file.save", "Save File", "Ctrl+S"),

    # Edit
    ("edit.undo", "Undo", "Ctrl+Z"),
    ("edit.redo", "Redo", "Ctrl+Y"),
    ("edit.copy", "Copy", "Ctrl+C"),
    ("edit.cut", "Cut", "Ctrl+X"),
    ("edit.paste", "Paste", "Ctrl+V"),
    ("edit.delete", "Delete Selection", "Delete"),
    ("edit.selectAll", "Select All", "Ctrl+A"),
    ("edit.rotate", "Rotate Component", "R"),
    ("edit.find", "Find Elements", "Ctrl+F"),
    ("edit.flipWire", "Flip Wire Direction", "F"),
    ("edit.splitWire", "Split Wire", "S"),
    ("edit.escape", "Cancel / Deselect", "Escape"),

    # View
    ("view.zoomIn", "Zoom In", "Ctrl+Plus"),
    ("view.zoomOut", "Zoom Out", "Ctrl+Minus"),
    ("view.fit", "Fit to Window", "F1"),
    ("view.treeToggle", "Toggle Tree View", "F5"),
    ("view.presentation", "Presentation Mode", "F4"),

    # Simulation
    ("sim.start", "Start/Stop Simulation", "Space"),
    ("sim.microStep", "Micro Step", "V"),
    ("sim.runToBreakMicro", "Run to Break (Micro)", "B"),
    ("sim.runMicro", "Run Micro Mode", "G"),
    ("sim.fastRun", "Fast Run to Break", "F7"),
    ("sim.toggleClock", "Toggle Clock", "C"),
    ("sim.showData", "Show Data Table", "F6"),
    ("sim.runTests", "Run Tests", "F8"),
    ("sim.runAllTests", "Run All Tests", "F11"),

    # Tools
    ("tools.componentSearch", "Component Search", "F2"),
    ("tools.insertLast", "Insert Last Component", "L"),

    # Analysis
    ("analysis.analyse", "Analyse Circuit", "F9"),
]
