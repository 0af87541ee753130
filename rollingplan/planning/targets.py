"""Weekly targets, deload state and the hard-session ceiling.

Quotas are counts per modality; deload changes durations, never counts.
Deload is recomputed every run from the current load ratio, an active
status window or a request carried over from reconciliation. It is not
sticky state.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger

from rollingplan.config.settings import Settings, settings as default_settings
from rollingplan.domain.enums import FitnessLevel, Hardness, Modality, PlanMode
from rollingplan.domain.models import Baseline, ClassifiedWorkout, LoadRatio
from rollingplan.planning.phase import round_half_up

FITNESS_HARD_ANCHOR = {
    FitnessLevel.LOW: 2,
    FitnessLevel.MODERATE: 3,
    FitnessLevel.HIGH: 4,
    FitnessLevel.ADVANCED: 5,
}
ACWR_UNDERTRAINED_BELOW = 0.8
ACWR_CAUTION_ABOVE = 1.25
VERY_HARD_FATIGUE_COUNT = 2


@dataclass(frozen=True)
class WeeklyTargets:
    """Session quotas for the planning week.

    Attributes:
        endurance: Weekly endurance session target
        strength: Weekly strength session target
        completed_endurance: Endurance sessions already done in the rolling week
        completed_strength: Strength sessions already done in the rolling week
        deload: Whether deload durations apply
        deload_reasons: Why deload is active (risk tier, status window, request)
    """

    endurance: int
    strength: int
    completed_endurance: int = 0
    completed_strength: int = 0
    deload: bool = False
    deload_reasons: tuple[str, ...] = field(default_factory=tuple)

    @property
    def remaining_endurance(self) -> int:
        return max(0, self.endurance - self.completed_endurance)

    @property
    def remaining_strength(self) -> int:
        return max(0, self.strength - self.completed_strength)

    def to_dict(self) -> dict[str, object]:
        return {
            "endurancePerWeek": self.endurance,
            "strengthPerWeek": self.strength,
            "completedEndurance": self.completed_endurance,
            "completedStrength": self.completed_strength,
            "remainingEndurance": self.remaining_endurance,
            "remainingStrength": self.remaining_strength,
            "deload": self.deload,
            "deloadReasons": list(self.deload_reasons),
        }


def compute_targets(
    baseline: Baseline,
    mode: PlanMode,
    recent: Iterable[ClassifiedWorkout],
    load_ratio: LoadRatio,
    *,
    deload_requested: bool = False,
    status_window_active: bool = False,
    settings: Settings | None = None,
) -> WeeklyTargets:
    """Derive weekly quotas and deload state.

    Args:
        baseline: Intake baseline
        mode: Planning mode
        recent: Workouts classified over the rolling week [today-6, today]
        load_ratio: Current load ratio report
        deload_requested: Deload carried over from reconciliation
        status_window_active: Whether an illness/travel/injury window is active
        settings: Optional settings override

    Returns:
        WeeklyTargets
    """
    cfg = settings or default_settings
    endurance = 0
    strength = 0
    if mode in {PlanMode.HYBRID, PlanMode.ENDURANCE_ONLY}:
        endurance = baseline.running_frequency_per_week or cfg.default_endurance_frequency
    if mode in {PlanMode.HYBRID, PlanMode.STRENGTH_ONLY}:
        strength = baseline.strength_frequency_per_week or cfg.default_strength_frequency

    recent = list(recent)
    completed_endurance = sum(1 for w in recent if w.modality == Modality.ENDURANCE)
    completed_strength = sum(1 for w in recent if w.modality == Modality.STRENGTH)

    reasons: list[str] = []
    if load_ratio.calls_for_deload:
        reasons.append(f"acwr_{load_ratio.risk_tier.value}")
    if status_window_active:
        reasons.append("status_window")
    if deload_requested:
        reasons.append("reconciliation")

    targets = WeeklyTargets(
        endurance=endurance,
        strength=strength,
        completed_endurance=completed_endurance,
        completed_strength=completed_strength,
        deload=bool(reasons),
        deload_reasons=tuple(reasons),
    )
    logger.info(
        "Weekly targets computed",
        mode=mode.value,
        remaining_endurance=targets.remaining_endurance,
        remaining_strength=targets.remaining_strength,
        deload=targets.deload,
    )
    return targets


def deload_minutes(minutes: int, hardness: Hardness, settings: Settings | None = None) -> int:
    """Scale a duration for deload by session hardness.

    Hard and very hard sessions take the hard factor (0.55), normal ones the
    easy factor (0.75). Halves round up, so 90 becomes 50 or 68.
    """
    cfg = settings or default_settings
    factor = cfg.deload_hard_factor if hardness.is_hard else cfg.deload_easy_factor
    return round_half_up(minutes * factor)


def derive_hard_ceiling(
    baseline: Baseline,
    ratio: float | None,
    very_hard_count: int,
    settings: Settings | None = None,
) -> int:
    """Maximum hard sessions per rolling week.

    An explicit maxHardSessionsPerWeek wins. Otherwise the perceived fitness
    anchor is nudged +1 when undertrained (ACWR < 0.8), -1 when ACWR > 1.25
    and -1 after 2+ very hard sessions in the last 7 days, then clamped.
    """
    cfg = settings or default_settings
    if baseline.max_hard_sessions_per_week is not None:
        return max(cfg.hard_ceiling_min, min(cfg.hard_ceiling_max, baseline.max_hard_sessions_per_week))

    ceiling = FITNESS_HARD_ANCHOR.get(baseline.perceived_fitness, cfg.default_hard_ceiling)
    if ratio is not None and ratio < ACWR_UNDERTRAINED_BELOW:
        ceiling += 1
    if ratio is not None and ratio > ACWR_CAUTION_ABOVE:
        ceiling -= 1
    if very_hard_count >= VERY_HARD_FATIGUE_COUNT:
        ceiling -= 1
    return max(cfg.hard_ceiling_min, min(cfg.hard_ceiling_max, ceiling))
