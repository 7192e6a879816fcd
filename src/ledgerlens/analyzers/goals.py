"""
Goal Tracker — progress, schedule status and projected completion.

Goals carry an optional contribution schedule. Without one no projection is
made; the "no schedule" case is an explicit ``None`` branch rather than NaN
leaking through the arithmetic.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable

from ledgerlens.analyzers.periods import add_months, elapsed_percentage
from ledgerlens.models.financial import Contribution, ContributionFrequency, Goal, GoalStatus
from ledgerlens.models.report import GoalProgress, GoalScheduleStatus, GoalSummary

logger = logging.getLogger("ledgerlens.analyzers.goals")

# A goal is behind once elapsed time runs this many points ahead of progress.
BEHIND_SCHEDULE_SLACK = 10

# Contributions per month for each frequency.
MONTHLY_MULTIPLIERS: dict[ContributionFrequency, float] = {
    ContributionFrequency.DAILY: 30.44,
    ContributionFrequency.WEEKLY: 4.33,
    ContributionFrequency.BIWEEKLY: 2.17,
    ContributionFrequency.MONTHLY: 1.0,
}


@dataclass(frozen=True)
class GoalPace:
    """Inputs to schedule classification."""

    progress_percentage: float
    elapsed_time_percentage: float


GoalRule = tuple[GoalScheduleStatus, Callable[[GoalPace], bool]]

# Compared at whole-percent precision, the way progress bars display them.
GOAL_STATUS_RULES: list[GoalRule] = [
    (GoalScheduleStatus.COMPLETED, lambda p: p.progress_percentage >= 100),
    (
        GoalScheduleStatus.BEHIND_SCHEDULE,
        lambda p: round(p.elapsed_time_percentage) >= round(p.progress_percentage) + BEHIND_SCHEDULE_SLACK,
    ),
]
GOAL_STATUS_DEFAULT = GoalScheduleStatus.ON_TRACK


def classify_goal(pace: GoalPace, rules: list[GoalRule] | None = None) -> GoalScheduleStatus:
    """Return the status of the first matching rule."""
    for status, matches in rules or GOAL_STATUS_RULES:
        if matches(pace):
            return status
    return GOAL_STATUS_DEFAULT


def progress_percentage(current: float, target: float) -> float:
    """Progress toward ``target``, clamped to [0, 100].

    A zero target counts as met once anything is saved.

    Raises:
        ValueError: If ``target`` is negative.
    """
    if target < 0:
        raise ValueError(f"Target amount must not be negative, got {target}")
    if target == 0:
        return 100.0 if current > 0 else 0.0
    return min(100.0, max(0.0, current / target * 100))


def monthly_contribution(contribution: Contribution | None) -> float | None:
    """Monthly-equivalent contribution, or ``None`` without a schedule."""
    if contribution is None:
        return None
    multiplier = MONTHLY_MULTIPLIERS.get(contribution.frequency)
    if multiplier is None:
        return None
    return contribution.amount * multiplier


def projected_completion(goal: Goal, today: date | None = None) -> date | None:
    """
    Estimate when a goal reaches its target at the scheduled contribution.

    Returns ``today`` when the target is already met, ``None`` when there is no
    usable schedule (missing, or a monthly equivalent of zero or less).
    """
    ref = today or date.today()
    monthly = monthly_contribution(goal.contribution)
    remaining = goal.target_amount - goal.current_amount

    if remaining <= 0:
        return ref
    if monthly is None or monthly <= 0:
        return None

    months_needed = math.ceil(remaining / monthly)
    return add_months(ref, months_needed)


_TRANSITIONS: dict[str, tuple[set[GoalStatus], GoalStatus, str]] = {
    "pause": ({GoalStatus.ACTIVE}, GoalStatus.PAUSED, "Only active goals can be paused"),
    "resume": ({GoalStatus.PAUSED}, GoalStatus.ACTIVE, "Only paused goals can be resumed"),
    "complete": ({GoalStatus.ACTIVE, GoalStatus.PAUSED}, GoalStatus.COMPLETED, "Goal is already completed"),
}


def transition_goal(status: GoalStatus, action: str) -> GoalStatus:
    """Next lifecycle status for ``pause``, ``resume`` or ``complete``.

    Raises:
        ValueError: For an unknown action or an illegal transition.
    """
    if action not in _TRANSITIONS:
        raise ValueError(f"Unknown goal action: {action}")
    allowed, target, message = _TRANSITIONS[action]
    if GoalStatus(status) not in allowed:
        raise ValueError(message)
    return target


def should_auto_complete(goal: Goal) -> bool:
    """True when an active goal has reached its target."""
    return goal.status == GoalStatus.ACTIVE and goal.current_amount >= goal.target_amount


class GoalTracker:
    """
    Track savings goals.

    Example usage:
        tracker = GoalTracker()
        progress = tracker.track(goal, today=date(2025, 7, 1))
        print(progress.status.value, progress.projected_completion)
    """

    def __init__(self, rules: list[GoalRule] | None = None):
        self.rules = rules or GOAL_STATUS_RULES

    def track(self, goal: Goal, today: date | None = None) -> GoalProgress:
        """Compute derived progress figures for one goal."""
        ref = today or date.today()

        progress = progress_percentage(goal.current_amount, goal.target_amount)
        elapsed = elapsed_percentage(goal.start_date, goal.target_date, ref)
        status = classify_goal(
            GoalPace(progress_percentage=progress, elapsed_time_percentage=elapsed),
            self.rules,
        )

        return GoalProgress(
            goal_id=goal.id,
            name=goal.name,
            lifecycle_status=goal.status.value,
            target_amount=goal.target_amount,
            current_amount=goal.current_amount,
            remaining_amount=max(0.0, goal.target_amount - goal.current_amount),
            progress_percentage=round(progress, 1),
            elapsed_time_percentage=round(elapsed, 1),
            status=status,
            monthly_contribution=monthly_contribution(goal.contribution),
            projected_completion=projected_completion(goal, ref),
            days_remaining=max(0, (goal.target_date - ref).days),
        )

    def summarize(self, goals: Iterable[Goal], today: date | None = None) -> GoalSummary:
        """Progress for every goal plus aggregate figures.

        Goals are ordered by priority (1 first), then by target date.
        """
        ref = today or date.today()
        ordered = sorted(goals, key=lambda g: (g.priority, g.target_date))
        tracked = [self.track(g, ref) for g in ordered]

        total_target = sum(g.target_amount for g in ordered)
        total_saved = sum(g.current_amount for g in ordered)

        behind = sum(1 for p in tracked if p.status == GoalScheduleStatus.BEHIND_SCHEDULE)
        if behind:
            logger.info(f"{behind} of {len(tracked)} goals are behind schedule")

        return GoalSummary(
            goals=tracked,
            total_target=total_target,
            total_saved=total_saved,
            overall_progress=round(progress_percentage(total_saved, total_target), 1),
        )


# Convenience functions
def track_goal(goal: Goal, today: date | None = None) -> GoalProgress:
    """Quick single-goal progress."""
    return GoalTracker().track(goal, today)
