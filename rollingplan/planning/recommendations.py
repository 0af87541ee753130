"""Short coaching notes attached to a plan."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from rollingplan.domain.enums import GoalKind, MarathonPhaseName, Modality, PlanFlag
from rollingplan.domain.models import Goal, LoadRatio, PlanSession, ReadinessSnapshot
from rollingplan.planning.phase import TAPER_FACTORS, MarathonPhase


@dataclass(frozen=True)
class Recommendation:
    kind: str
    title: str
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "title": self.title, "text": self.text}


PHASE_TEXT = {
    MarathonPhaseName.BASE: "Focus: aerobic foundation. Easy runs dominate; one quality session keeps the engine sharp.",
    MarathonPhaseName.BUILD: "Focus: race-specific quality. Marathon pace and intervals alternate while the long run grows.",
    MarathonPhaseName.PEAK: "Focus: sharpest week. Longest long run of the build. Back off next week.",
    MarathonPhaseName.POST: "Race complete. Easy recovery only, no hard sessions for at least 2 weeks.",
}


def polarized_ratio(sessions: Iterable[PlanSession]) -> float:
    """Share of hard sessions among planned endurance sessions (0 when none)."""
    endurance = [s for s in sessions if s.modality == Modality.ENDURANCE]
    if not endurance:
        return 0.0
    return round(sum(1 for s in endurance if s.is_hard) / len(endurance), 2)


def _phase_recommendation(phase: MarathonPhase) -> Recommendation:
    label = "Post-race" if phase.name == MarathonPhaseName.POST else phase.name.value.capitalize()
    weeks_note = f" ({phase.weeks_to_race} weeks to race)" if phase.weeks_to_race else ""
    if phase.name == MarathonPhaseName.TAPER:
        drop = 1 - TAPER_FACTORS[min(phase.weeks_into_phase - 1, len(TAPER_FACTORS) - 1)]
        text = f"Focus: freshness. Volume drops {round(drop * 100)}%, intensity maintained. Don't add extra sessions."
    else:
        text = PHASE_TEXT[phase.name]
    return Recommendation("marathon_phase", f"Marathon phase: {label}{weeks_note}", text)


def build_recommendations(
    goals: Sequence[Goal],
    flags: Iterable[PlanFlag],
    *,
    load_ratio: LoadRatio,
    readiness: ReadinessSnapshot | None = None,
    phase: MarathonPhase | None = None,
) -> list[Recommendation]:
    """Assemble recommendations from flags, goals and phase.

    Args:
        goals: Intake goals
        flags: Flags raised during planning
        load_ratio: Load ratio report (ratio shown in the deload note)
        readiness: Readiness snapshot, used when the gate acted
        phase: Marathon phase, if a race is planned

    Returns:
        Ordered recommendations
    """
    flags = set(flags)
    recs: list[Recommendation] = []

    if PlanFlag.POLARIZED_RATIO_EXCEEDED in flags:
        recs.append(
            Recommendation(
                "polarized",
                "80/20 endurance ratio",
                "More than 25% of endurance sessions are hard. Aim for ~80% easy, ~20% hard; "
                "consider swapping one quality session for Zone 2.",
            )
        )
    if PlanFlag.LR_CARRYOVER_FAILED in flags:
        recs.append(
            Recommendation(
                "lr_carryover",
                "Make up the long run",
                "The long run was downgraded for readiness and no safe slot was left this week. "
                "Prioritise it next week.",
            )
        )
    if PlanFlag.STRENGTH_SHORTFALL in flags:
        recs.append(
            Recommendation(
                "strength_shortfall",
                "Strength target missed",
                "Fewer than 2 strength sessions fit this week. Hard budget, rest days or blocked days limited placement.",
            )
        )
    if any(g.kind == GoalKind.SLEEP for g in goals):
        recs.append(Recommendation("sleep", "Sleep protocol", "Aim for 7-9h sleep. Keep bedtime and wake time consistent."))
    if any(g.kind == GoalKind.BODYCOMP for g in goals):
        recs.append(Recommendation("bodycomp", "Nutrition", "Prioritise protein and place carbs around training sessions."))
    recs.append(
        Recommendation(
            "planning",
            "Rolling plan",
            "Only the next 7 days are fixed. Replan weekly from recent execution and recovery.",
        )
    )
    if PlanFlag.READINESS_GATED in flags and readiness is not None:
        score = round(readiness.score)
        label = readiness.label or "low"
        if score < 50:
            text = f"Readiness today is {score} ({label}). The first planned session was downgraded to Zone 2. Consider extra rest."
        else:
            text = f"Readiness today is {score} ({label}). Intervals/Tempo downgraded to Zone 2 on the first planned day."
        recs.append(Recommendation("readiness", "Readiness gate", text))
    if PlanFlag.DELOAD in flags:
        ratio_note = f" (ACWR {load_ratio.ratio})" if load_ratio.ratio is not None else ""
        recs.append(
            Recommendation(
                "recovery",
                "Deload signal",
                f"Deload week{ratio_note}. Hard sessions shortened ~45%, easy sessions ~25%. Intensity stays, only volume drops.",
            )
        )
    if phase is not None:
        recs.append(_phase_recommendation(phase))
    return recs
