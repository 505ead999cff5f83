"""
Configuration & Tuning
======================
This module serves as the central registry for the tunable constants of the
map engine.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (repulsion, damping, zoom limits...)
   scattered throughout the simulation, camera and renderer code.
2. Testability: Every config is an immutable dataclass passed at construction,
   so tests can run the engine under different tunings side by side
   (use ``dataclasses.replace`` to derive a variant).

Exports:
    SimulationConfig: Physics and layout constants.
    CameraConfig: Zoom limits and animation easing.
    InteractionConfig: Pointer thresholds and hover policy.
    RenderConfig: Colours, opacities and animation speeds of the renderer.
    EngineConfig: Aggregate of the above.
"""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SimulationConfig:
    """Constants of the three layout modes."""
    # --- Force-directed ---
    repulsion: float = 150.0
    link_strength: float = 0.06
    link_distance: float = 70.0
    center_strength: float = 0.01
    damping: float = 0.9
    energy_threshold: float = 0.005  # per moving node: settled when sum(v^2) < threshold * n
    min_distance: float = 1.0
    spawn_spread: float = 100.0  # new nodes appear within +-spread/2 of the centre
    mode_kick: float = 1.0  # span of the random velocity added when (re)entering force mode

    # --- Orbit ---
    orbit_margin: float = 5.0  # radius_factor = 1 - weight / (100 + margin)
    orbit_extent: float = 0.9  # fraction of the half viewport used by the outer ring
    orbit_seek: float = 0.05
    orbit_default_weight: float = 50.0
    orbit_leaf_jitter: float = 0.4  # total angular jitter span in radians
    orbit_group_jitter: float = 0.2
    orbit_centering_threshold: float = 0.05  # per node

    # --- Focus path ---
    focus_seek: float = 0.1
    focus_spacing_x: float = 120.0
    focus_spacing_y: float = 100.0
    focus_row_fill: float = 0.8  # fraction of the viewport width used by one row

    def __post_init__(self) -> None:
        if not 0.0 < self.damping < 1.0:
            raise ValueError(f"damping must be in (0, 1), got {self.damping}.")
        if self.energy_threshold <= 0.0:
            raise ValueError("energy_threshold must be positive.")
        if self.min_distance <= 0.0:
            raise ValueError("min_distance must be positive.")
        for name in ("orbit_seek", "focus_seek"):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {value}.")
        if self.focus_spacing_x <= 0.0 or self.focus_spacing_y <= 0.0:
            raise ValueError("focus spacing must be positive.")


@dataclass(frozen=True)
class CameraConfig:
    k_min: float = 0.2
    k_max: float = 5.0
    blend: float = 0.08
    epsilon_translate: float = 0.1
    epsilon_scale: float = 0.001
    fit_padding: float = 100.0
    fit_max_zoom: float = 1.5
    zoom_step: float = 1.3

    def __post_init__(self) -> None:
        if not 0.0 < self.k_min <= 1.0 <= self.k_max:
            raise ValueError(f"Zoom range [{self.k_min}, {self.k_max}] must contain 1.0.")
        if not 0.0 < self.blend <= 1.0:
            raise ValueError(f"blend must be in (0, 1], got {self.blend}.")
        if self.zoom_step <= 1.0:
            raise ValueError("zoom_step must be greater than 1.")


@dataclass(frozen=True)
class InteractionConfig:
    """
    Pointer handling constants.

    ``hover_categories`` is the hover policy: only nodes whose category is
    listed are forwarded to the host's hover callback. Highlighting and the
    tooltip are driven by every hovered node regardless of the policy.
    """
    hit_margin: float = 5.0  # screen pixels
    click_threshold: float = 3.0  # screen pixels
    wheel_sensitivity: float = 0.001
    wheel_min_factor: float = 0.1  # floor for one wheel event, large deltas still zoom out
    hover_categories: frozenset[str] = frozenset({"group"})

    def __post_init__(self) -> None:
        if self.hit_margin < 0.0 or self.click_threshold < 0.0:
            raise ValueError("hit_margin and click_threshold must be non-negative.")
        if not 0.0 < self.wheel_min_factor <= 1.0:
            raise ValueError(f"wheel_min_factor must be in (0, 1], got {self.wheel_min_factor}.")


@dataclass(frozen=True)
class RenderConfig:
    background: str = "#0f172a"
    link_color: str = "rgba(100, 116, 139, 0.3)"
    link_dimmed_color: str = "rgba(100, 116, 139, 0.05)"
    link_width: float = 1.0
    orbit_link_width: float = 0.5
    path_color: str = "rgba(56, 189, 248, 0.9)"
    path_width: float = 2.0
    path_dash: tuple[float, float] = (6.0, 8.0)
    dash_speed: float = 24.0  # model units per second
    dim_opacity: float = 0.05
    border_width: float = 2.0
    leaf_glow: float = 2.0
    group_glow: float = 4.0
    ring_colors: tuple[str, str, str] = (
        "rgba(239, 68, 68, 0.2)",
        "rgba(250, 204, 21, 0.2)",
        "rgba(52, 211, 153, 0.2)",
    )
    ring_opacity: float = 0.3
    tooltip_background: str = "rgba(15, 23, 42, 0.85)"
    tooltip_title_color: str = "white"
    tooltip_text_color: str = "#cbd5e1"
    tooltip_font_size: int = 12
    tooltip_padding: float = 8.0
    tooltip_offset: float = 10.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.dim_opacity <= 1.0:
            raise ValueError(f"dim_opacity must be in [0, 1], got {self.dim_opacity}.")


@dataclass(frozen=True)
class EngineConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    interaction: InteractionConfig = field(default_factory=InteractionConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    frame_interval_ms: int = 16
