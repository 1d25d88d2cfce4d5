"""
Milestone Generator - splits a quote total and duration into three phases.
"""
import math
from dataclasses import dataclass, field


@dataclass
class Milestone:
    """One payment/delivery phase of a quote."""
    title: str
    description: str
    deliverables: list[str] = field(default_factory=list)
    estimated_days: int = 0
    amount: float = 0.0


# (title, description, deliverables, amount fraction, day fraction)
PHASES = (
    (
        'Project Kickoff & Planning',
        'Initial planning, wireframes, and project setup',
        ('Project plan', 'Wireframes', 'Technical specifications'),
        0.3,
        0.2,
    ),
    (
        'Design & Development',
        'UI/UX design and core development',
        ('Design mockups', 'Core functionality', 'Responsive layout'),
        0.4,
        0.5,
    ),
    (
        'Testing & Deployment',
        'Quality assurance, testing, and final deployment',
        ('Testing report', 'Bug fixes', 'Live deployment'),
        0.3,
        0.3,
    ),
)


def split_into_milestones(total: float, estimated_days: int) -> list[Milestone]:
    """
    Split a total amount and duration into the three standard phases.

    Day shares are rounded up independently, so their sum can exceed
    estimated_days by up to 2.
    """
    return [
        Milestone(
            title=title,
            description=description,
            deliverables=list(deliverables),
            estimated_days=math.ceil(estimated_days * day_share),
            amount=round(total * amount_share, 2),
        )
        for title, description, deliverables, amount_share, day_share in PHASES
    ]
