"""
Side Panels
Legend, weight-tier summary and the focus/filter controls of the map window.
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QBrush, QPainter, QPen
from PySide6.QtWidgets import (
    QFormLayout, QGroupBox, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget,
)

from studymap.model.graph import ATTENTION_WEIGHT, Node, WeightTier
from studymap.view.colors import parse_color
from studymap.view.styles import QUESTION_HOT_STYLE, QUESTION_STYLE, SUBJECT_STYLE, TOPIC_STYLE, WEAK_BORDER


class Swatch(QWidget):
    """Small filled circle with an optional border, used by the legend."""

    def __init__(self, color: str, border: Optional[str] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._color = parse_color(color)
        self._border = parse_color(border) if border else None
        self.setFixedSize(14, 14)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.setBrush(QBrush(self._color))
        if self._border is not None:
            painter.setPen(QPen(self._border, 2))
        else:
            painter.setPen(Qt.PenStyle.NoPen)
        painter.drawEllipse(2, 2, 10, 10)
        painter.end()


class LegendPanel(QGroupBox):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__("Legend", parent)
        layout = QFormLayout(self)
        layout.addRow(Swatch(SUBJECT_STYLE.color), QLabel("Subject"))
        layout.addRow(Swatch(TOPIC_STYLE.color), QLabel("Topic"))
        layout.addRow(Swatch(QUESTION_HOT_STYLE.color), QLabel("Hot question"))
        layout.addRow(Swatch(QUESTION_STYLE.color), QLabel("Question"))
        layout.addRow(Swatch(QUESTION_STYLE.color, WEAK_BORDER), QLabel(f"Low mastery (<{ATTENTION_WEIGHT:.0f}%)"))


class TierSummaryPanel(QGroupBox):
    """Leaf counts per weight tier, shown next to the orbit layout."""

    TIER_LABELS = {
        WeightTier.CRITICAL: ("Critical zone", "#ef4444"),
        WeightTier.ATTENTION: ("Attention zone", "#f59e0b"),
        WeightTier.SAFE: ("Safe zone", "#10b981"),
    }

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__("Orbital summary", parent)
        layout = QFormLayout(self)
        self._counts: dict[WeightTier, QLabel] = {}
        for tier, (text, color) in self.TIER_LABELS.items():
            row = QHBoxLayout()
            row.addWidget(Swatch(color))
            row.addWidget(QLabel(text))
            row.addStretch()
            count = QLabel("0")
            count.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
            row.addWidget(count)
            self._counts[tier] = count
            layout.addRow(row)

    def set_counts(self, counts: dict[WeightTier, int]) -> None:
        for tier, label in self._counts.items():
            label.setText(str(counts.get(tier, 0)))

    def count(self, tier: WeightTier) -> int:
        return int(self._counts[tier].text())


class FocusPanel(QGroupBox):
    """Subtree filter and learning path controls."""
    focus_requested = Signal(str)  # group node id
    focus_exit_requested = Signal()
    filter_clear_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__("Learning path", parent)
        layout = QVBoxLayout(self)

        self.lbl_filter = QLabel("Filter: none")
        self.lbl_filter.setWordWrap(True)
        layout.addWidget(self.lbl_filter)

        self.btn_clear_filter = QPushButton("Clear filter")
        self.btn_clear_filter.setEnabled(False)
        self.btn_clear_filter.clicked.connect(self.filter_clear_requested.emit)
        layout.addWidget(self.btn_clear_filter)

        self.lbl_candidate = QLabel("Hover a subject or topic to analyse it.")
        self.lbl_candidate.setWordWrap(True)
        layout.addWidget(self.lbl_candidate)

        self.btn_focus = QPushButton("Show learning path")
        self.btn_focus.setEnabled(False)
        self.btn_focus.clicked.connect(self._on_focus_clicked)
        layout.addWidget(self.btn_focus)

        self.btn_exit = QPushButton("Exit learning path")
        self.btn_exit.setVisible(False)
        self.btn_exit.clicked.connect(self.focus_exit_requested.emit)
        layout.addWidget(self.btn_exit)

        self._candidate: Optional[Node] = None
        self._focused = False

    def set_candidate(self, node: Optional[Node]) -> None:
        self._candidate = node
        if node is None:
            self.lbl_candidate.setText("Hover a subject or topic to analyse it.")
        else:
            self.lbl_candidate.setText(f"Analyse: <b>{node.label}</b>")
        self._refresh()

    def set_filter(self, node: Optional[Node]) -> None:
        self.lbl_filter.setText(f"Filter: <b>{node.label}</b>" if node is not None else "Filter: none")
        self.btn_clear_filter.setEnabled(node is not None)

    def set_focus(self, node: Optional[Node]) -> None:
        self._focused = node is not None
        self.setTitle(f"Learning path: {node.label}" if node is not None else "Learning path")
        self.btn_exit.setVisible(self._focused)
        self._refresh()

    def _refresh(self) -> None:
        self.btn_focus.setEnabled(self._candidate is not None and not self._focused)

    def _on_focus_clicked(self) -> None:
        if self._candidate is not None:
            self.focus_requested.emit(self._candidate.id)
