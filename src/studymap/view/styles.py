"""
Node Styles
Radius and colour presets of the study map node kinds, shared by the
legend and by anything that builds graphs for the map.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NodeStyle:
    radius: float
    color: str


SUBJECT_STYLE = NodeStyle(radius=14.0, color="rgb(56, 189, 248)")
TOPIC_STYLE = NodeStyle(radius=10.0, color="rgb(52, 211, 153)")
QUESTION_STYLE = NodeStyle(radius=5.0, color="rgb(156, 163, 175)")
QUESTION_HOT_STYLE = NodeStyle(radius=7.0, color="rgb(250, 204, 21)")

# border of leaves below the attention weight
WEAK_BORDER = "rgba(239, 68, 68, 0.8)"
