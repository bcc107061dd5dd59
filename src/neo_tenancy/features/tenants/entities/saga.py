"""Provisioning saga state tracking."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from ....config.constants import SagaState
from ....core.exceptions import NeoTenancyError


class SagaStep(str, Enum):
    """Mutating provisioning steps that have a compensation."""
    
    CREATE_TENANT = "create_tenant"
    SEED_SETTINGS = "seed_settings"
    SEED_ROLES = "seed_roles"
    ASSIGN_OWNER = "assign_owner"
    SET_ACTIVE_TENANT = "set_active_tenant"
    CREATE_MODULES = "create_modules"


ALLOWED_TRANSITIONS: Dict[SagaState, FrozenSet[SagaState]] = {
    SagaState.NOT_STARTED: frozenset({SagaState.TENANT_CREATED, SagaState.FAILED, SagaState.ROLLING_BACK}),
    SagaState.TENANT_CREATED: frozenset({SagaState.ROLES_CREATED, SagaState.ROLLING_BACK}),
    SagaState.ROLES_CREATED: frozenset({SagaState.MEMBERSHIP_ASSIGNED, SagaState.ROLLING_BACK}),
    SagaState.MEMBERSHIP_ASSIGNED: frozenset({SagaState.MODULES_CREATED, SagaState.ROLLING_BACK}),
    SagaState.MODULES_CREATED: frozenset({SagaState.COMPLETE, SagaState.ROLLING_BACK}),
    SagaState.ROLLING_BACK: frozenset({SagaState.FAILED}),
    SagaState.COMPLETE: frozenset(),
    SagaState.FAILED: frozenset(),
}


@dataclass
class ProvisioningProgress:
    """Per-run record of what the saga has done so far.
    
    A step is ``started`` before its first write and ``completed`` after
    its last. Rollback compensates every started step: a step that failed
    halfway, or timed out, may have left writes behind, and every
    compensation is a delete-if-exists on ids this run generated.
    """
    
    tenant_id: Optional[str] = None
    state: SagaState = SagaState.NOT_STARTED
    started: List[SagaStep] = field(default_factory=list)
    completed: List[SagaStep] = field(default_factory=list)
    modules: List[str] = field(default_factory=list)
    previous_active_tenant: Optional[str] = None
    
    def transition(self, new_state: SagaState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise NeoTenancyError(
                f"Invalid provisioning transition {self.state.value} -> {new_state.value}",
                details={"from": self.state.value, "to": new_state.value},
            )
        self.state = new_state
    
    def start(self, step: SagaStep) -> None:
        self.started.append(step)
    
    def complete(self, step: SagaStep) -> None:
        self.completed.append(step)
    
    def was_started(self, step: SagaStep) -> bool:
        return step in self.started


@dataclass(frozen=True)
class ProvisioningResult:
    """Report of a successful provisioning run."""
    
    tenant_id: str
    modules: List[str]
    role_ids: List[str]
    state: SagaState
    templates_copied: int = 0
