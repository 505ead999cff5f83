"""
The MODEL layer contains pure data structures: the validated node/link forest,
the per-node kinetic state, the camera transform and the layout modes.
It has NO knowledge of the GUI (Qt).
"""
