"""
Map Engine Controllers
======================
The logic that moves the map: physics/layout simulation, camera animation
and pointer interaction, tied together by ``GraphEngine``.

Note: This package should be pure Python/NumPy and should NOT import PySide6.
"""
