"""Interactive study map: force, orbit and learning-path layouts of a subject forest."""
from studymap.config import (
    CameraConfig, EngineConfig, InteractionConfig, RenderConfig, SimulationConfig,
)
from studymap.controller.engine import GraphEngine
from studymap.model.graph import Graph, Link, Node, NodeCategory, WeightTier
from studymap.model.layout import FocusPathLayout, ForceLayout, LayoutMode, OrbitLayout

__all__ = [
    "CameraConfig",
    "EngineConfig",
    "FocusPathLayout",
    "ForceLayout",
    "Graph",
    "GraphEngine",
    "InteractionConfig",
    "LayoutMode",
    "Link",
    "Node",
    "NodeCategory",
    "OrbitLayout",
    "RenderConfig",
    "SimulationConfig",
    "WeightTier",
]
