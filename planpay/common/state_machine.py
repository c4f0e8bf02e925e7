"""Workflow states for one payment creation run.

A run moves strictly forward through the table below. `FAILED` is reachable
from every non-terminal state and ends the run. Once the gateway has accepted
the charge the run is committed: later failures leave a real charge behind.
"""

from dataclasses import dataclass, field
from enum import Enum


class WorkflowState(str, Enum):
    VALIDATING = "VALIDATING"
    STRUCTURAL_VALIDATING = "STRUCTURAL_VALIDATING"
    CHARGING = "CHARGING"
    PERSISTING = "PERSISTING"
    NOTIFYING = "NOTIFYING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


ALLOWED_TRANSITIONS: dict[WorkflowState, set[WorkflowState]] = {
    WorkflowState.VALIDATING: {WorkflowState.STRUCTURAL_VALIDATING, WorkflowState.FAILED},
    WorkflowState.STRUCTURAL_VALIDATING: {WorkflowState.CHARGING, WorkflowState.FAILED},
    WorkflowState.CHARGING: {WorkflowState.PERSISTING, WorkflowState.FAILED},
    WorkflowState.PERSISTING: {WorkflowState.NOTIFYING, WorkflowState.FAILED},
    WorkflowState.NOTIFYING: {WorkflowState.COMPLETED, WorkflowState.FAILED},
    WorkflowState.COMPLETED: set(),
    WorkflowState.FAILED: set(),
}

# States that can only be entered after a successful gateway charge.
COMMITTED_STATES = frozenset(
    {WorkflowState.PERSISTING, WorkflowState.NOTIFYING, WorkflowState.COMPLETED}
)


def validate_transition(current: WorkflowState, new: WorkflowState) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValueError(f"Invalid transition: {current.value} -> {new.value}")


@dataclass
class WorkflowRun:
    """Progress record of a single run, readable by the caller after it ends."""

    state: WorkflowState = WorkflowState.VALIDATING
    history: list[WorkflowState] = field(default_factory=lambda: [WorkflowState.VALIDATING])
    external_id: str | None = None
    failed_in: WorkflowState | None = None
    error: BaseException | None = None

    def advance(self, new: WorkflowState) -> None:
        validate_transition(self.state, new)
        if new in COMMITTED_STATES and self.external_id is None:
            raise ValueError(f"Cannot enter {new.value} before a charge is recorded")
        self.state = new
        self.history.append(new)

    def record_charge(self, external_id: str) -> None:
        """Mark the point of no return: the gateway accepted the charge."""

        if self.state != WorkflowState.CHARGING:
            raise ValueError(f"Charge recorded outside CHARGING (state={self.state.value})")
        self.external_id = external_id

    def fail(self, error: BaseException) -> None:
        failed_in = self.state
        validate_transition(failed_in, WorkflowState.FAILED)
        self.failed_in = failed_in
        self.error = error
        self.state = WorkflowState.FAILED
        self.history.append(WorkflowState.FAILED)

    @property
    def charge_committed(self) -> bool:
        return self.external_id is not None

    @property
    def safe_to_retry(self) -> bool:
        """True while no external side effect has happened."""

        return not self.charge_committed
