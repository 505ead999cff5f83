"""
Synthetic Study Forest
======================
Generates a random subject -> topic -> question forest for the demo
application and for manual testing of the map.

This is NOT the study tracker's graph builder: it fabricates weights instead
of deriving them from answer history. It only mimics the visual styles, so
the map looks like it does inside the tracker.
"""
from __future__ import annotations

import datetime
import logging
import math
from typing import Optional

import numpy as np

from studymap.model.graph import ATTENTION_WEIGHT, Link, Node, NodeCategory
from studymap.view.styles import QUESTION_HOT_STYLE, QUESTION_STYLE, WEAK_BORDER

logger = logging.getLogger(__name__)

SUBJECTS = (
    "Constitutional Law", "Administrative Law", "Portuguese", "Mathematics",
    "Informatics", "Accounting", "Economics", "Statistics",
)


def group_color(weight: float, is_subject: bool) -> str:
    """Saturation grows with the average mastery of the group."""
    if is_subject:
        return f"hsl(202, {40 + weight / 100 * 55:.0f}%, 60%)"
    return f"hsl(155, {40 + weight / 100 * 40:.0f}%, 52%)"


def make_forest(
    n_subjects: int = 4,
    topics_per_subject: tuple[int, int] = (2, 4),
    questions_per_topic: tuple[int, int] = (3, 8),
    seed: Optional[int] = None,
) -> tuple[list[Node], list[Link]]:
    """
    Random forest of subjects, topics and questions.

    Returns:
        (nodes, links) with group nodes first, so questions are drawn on top.
    """
    rng = np.random.default_rng(seed)
    today = datetime.date.today()

    subjects: list[Node] = []
    topics: list[Node] = []
    questions: list[Node] = []
    links: list[Link] = []

    for s in range(n_subjects):
        subject_id = f"subject-{s}"
        subject_name = SUBJECTS[s % len(SUBJECTS)]
        subject_weights: list[float] = []

        for t in range(int(rng.integers(topics_per_subject[0], topics_per_subject[1] + 1))):
            topic_id = f"topic-{s}-{t}"
            topic_weights: list[float] = []

            for q in range(int(rng.integers(questions_per_topic[0], questions_per_topic[1] + 1))):
                weight = float(np.clip(rng.normal(55.0, 25.0), 0.0, 100.0))
                hot = bool(rng.random() < 0.15)
                style = QUESTION_HOT_STYLE if hot else QUESTION_STYLE
                last_review = today - datetime.timedelta(days=int(rng.integers(0, 60)))
                questions.append(Node(
                    id=f"question-{s}-{t}-{q}",
                    category=NodeCategory.LEAF,
                    radius=style.radius,
                    color=style.color,
                    border_color=WEAK_BORDER if weight < ATTENTION_WEIGHT else None,
                    weight=weight,
                    label=f"Q{s + 1}.{t + 1}.{q + 1}",
                    payload={"last_review": last_review.strftime("%d/%m/%Y"), "hot": hot},
                ))
                links.append(Link(topic_id, f"question-{s}-{t}-{q}"))
                topic_weights.append(weight)

            topic_avg = float(np.mean(topic_weights)) if topic_weights else 50.0
            topics.append(Node(
                id=topic_id,
                category=NodeCategory.GROUP,
                radius=8.0 + min(math.log2(len(topic_weights) + 1) * 2.0, 8.0),
                color=group_color(topic_avg, is_subject=False),
                weight=topic_avg,
                label=f"{subject_name} / Topic {t + 1}",
                payload={"count": len(topic_weights)},
            ))
            links.append(Link(subject_id, topic_id))
            subject_weights.extend(topic_weights)

        subject_avg = float(np.mean(subject_weights)) if subject_weights else 50.0
        subjects.append(Node(
            id=subject_id,
            category=NodeCategory.GROUP,
            radius=12.0 + min(math.log2(len(subject_weights) + 1) * 2.5, 10.0),
            color=group_color(subject_avg, is_subject=True),
            weight=subject_avg,
            label=subject_name,
            payload={"count": len(subject_weights)},
        ))

    nodes = subjects + topics + questions
    logger.info(f"Generated demo forest: {len(subjects)} subjects, {len(topics)} topics, {len(questions)} questions.")
    return nodes, links
