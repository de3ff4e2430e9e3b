"""MLG (Managed List Governance) checklist definition and maturity tiers.

Four ordered phases. Phase 1 holds the three gatekeeper checkpoints whose
joint yes/weak status unlocks interpretation of phases 2-4.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Checkpoint:
    id: str
    label: str
    gatekeeper: bool = False


@dataclass(frozen=True)
class Phase:
    id: str
    name: str
    phase: int
    description: str
    checkpoints: tuple[Checkpoint, ...]


MLG_PHASES: tuple[Phase, ...] = (
    Phase(
        id="foundation",
        name="Foundation",
        phase=1,
        description="Baseline governance structure is established",
        checkpoints=(
            Checkpoint("cadence", "Review Cadence Established", gatekeeper=True),
            Checkpoint("health_criteria", "Health Criteria Defined", gatekeeper=True),
            Checkpoint("ownership", "Ownership Documented", gatekeeper=True),
            Checkpoint("scope", "Scope Documented"),
            Checkpoint("stakeholders", "Stakeholders Identified"),
        ),
    ),
    Phase(
        id="action",
        name="Action",
        phase=2,
        description="Active gap management and remediation workflows",
        checkpoints=(
            Checkpoint("gap_process", "Gap Identification Process"),
            Checkpoint("remediation_workflow", "Remediation Workflow Active"),
            Checkpoint("action_tracking", "Action Items Tracked"),
            Checkpoint("escalation", "Escalation Path Defined"),
            Checkpoint("communication", "Communication Plan"),
        ),
    ),
    Phase(
        id="controls",
        name="Controls",
        phase=3,
        description="Formal controls are mapped, tested, and evidenced",
        checkpoints=(
            Checkpoint("nist_mapped", "Controls Mapped to NIST"),
            Checkpoint("testing_schedule", "Control Testing Schedule"),
            Checkpoint("evidence", "Evidence Collection"),
            Checkpoint("exceptions", "Exception Management"),
            Checkpoint("automation", "Automation Integration"),
        ),
    ),
    Phase(
        id="maturity",
        name="Maturity",
        phase=4,
        description="Continuous improvement and predictive governance",
        checkpoints=(
            Checkpoint("monitoring", "Continuous Monitoring"),
            Checkpoint("kpis", "Metrics & KPIs Active"),
            Checkpoint("trends", "Trend Analysis"),
            Checkpoint("predictive", "Predictive Risk Scoring"),
            Checkpoint("knowledge", "Knowledge Management"),
        ),
    ),
)

CHECKPOINT_IDS: frozenset[str] = frozenset(
    cp.id for phase in MLG_PHASES for cp in phase.checkpoints
)

GATEKEEPER_IDS: tuple[str, ...] = tuple(
    cp.id for cp in MLG_PHASES[0].checkpoints if cp.gatekeeper
)

# ── Answer points ───────────────────────────────────────────────────────

ANSWER_POINTS: dict[str, float] = {
    "yes": 1.0,
    "weak": 0.5,
    "no": 0.0,
}

# Answers that keep a gatekeeper open
GATEKEEPER_PASSING_ANSWERS: frozenset[str] = frozenset({"yes", "weak"})

MLG_MAX_SCORE: int = 20

# ── Tiers (inclusive lower bounds, evaluated high to low) ────────────────

MATURITY_TIERS: tuple[tuple[float, str, str], ...] = (
    (16, "Mature", "BLUE"),
    (11, "Adequate", "GREEN"),
    (6, "Developing", "AMBER"),
    (0, "Deficient", "RED"),
)
