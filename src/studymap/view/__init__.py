"""
The VIEW layer: Qt widgets and QPainter drawing for the study map.
"""
