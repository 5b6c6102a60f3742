"""
Workflow simulator: paces save operations through timed pseudo-steps.
"""

import logging
import time
from collections.abc import Callable, Iterator
from datetime import datetime

from dentaldesk.faults import FaultPolicy, RandomFaultPolicy
from dentaldesk.types import (
    StepStatus,
    Workflow,
    WorkflowStatus,
    WorkflowStep,
    WorkflowType,
)
from dentaldesk.workflow.templates import ID_PREFIXES, WORKFLOW_NAMES, steps_for

_LOGGER = logging.getLogger(__name__)

StepCallback = Callable[[WorkflowStep, Workflow], None]


class WorkflowRegistry:
    """The active-workflow map, keyed by workflow id.

    Kept as an explicit object so a simulator (or a test) owns its own
    state instead of sharing a module-level singleton.
    """

    def __init__(self) -> None:
        self._workflows: dict[str, Workflow] = {}

    def register(self, workflow: Workflow) -> None:
        self._workflows[workflow.id] = workflow

    def get(self, workflow_id: str) -> Workflow | None:
        return self._workflows.get(workflow_id)

    def remove(self, workflow_id: str) -> Workflow | None:
        return self._workflows.pop(workflow_id, None)

    def values(self) -> list[Workflow]:
        return list(self._workflows.values())

    def clear(self) -> None:
        self._workflows.clear()

    def __contains__(self, workflow_id: object) -> bool:
        return workflow_id in self._workflows

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._workflows))

    def __len__(self) -> int:
        return len(self._workflows)


class WorkflowSimulator:
    """Creates and runs simulated multi-step workflows.

    Each workflow is a fixed list of steps. Executing it suspends for every
    step's planned duration and draws once per step from the fault policy;
    a failed draw ends the workflow. There is no retry, compensation or
    cancellation: this exists to pace the UI, not to make saves reliable.

    Example:
        >>> simulator = WorkflowSimulator()
        >>> workflow = simulator.create_patient_registration_workflow()
        >>> ok = await simulator.execute_workflow(workflow.id)
    """

    def __init__(
        self,
        *,
        registry: WorkflowRegistry | None = None,
        fault_policy: FaultPolicy | None = None,
        logger: logging.Logger | None = None,
    ):
        """Initialize the simulator.

        Args:
            registry: Active-workflow map. A fresh one is created if omitted.
            fault_policy: Step pacing and failure injection. Defaults to a
                RandomFaultPolicy with a 5% failure rate and real delays.
            logger: Logger instance.
        """
        self.registry = registry if registry is not None else WorkflowRegistry()
        self.fault_policy = fault_policy or RandomFaultPolicy()
        self._logger = logger or _LOGGER

    def _new_id(self, workflow_type: WorkflowType) -> str:
        base = f"{ID_PREFIXES[workflow_type]}-{int(time.time() * 1000)}"
        workflow_id = base
        suffix = 1
        while workflow_id in self.registry:
            workflow_id = f"{base}-{suffix}"
            suffix += 1
        return workflow_id

    def create_workflow(
        self, workflow_type: WorkflowType, *, file_count: int = 1
    ) -> Workflow:
        """Build a pending workflow of the given type and register it.

        Args:
            workflow_type: Which step template to use.
            file_count: Number of files, only used by FILE_UPLOAD.

        Returns:
            The registered workflow with every step pending.
        """
        workflow = Workflow(
            id=self._new_id(workflow_type),
            name=WORKFLOW_NAMES[workflow_type],
            type=workflow_type,
            steps=steps_for(workflow_type, file_count=file_count),
        )
        self.registry.register(workflow)
        self._logger.debug("Created workflow %s", workflow.id)
        return workflow

    def create_patient_registration_workflow(self) -> Workflow:
        return self.create_workflow(WorkflowType.PATIENT_REGISTRATION)

    def create_appointment_booking_workflow(self) -> Workflow:
        return self.create_workflow(WorkflowType.APPOINTMENT_BOOKING)

    def create_treatment_completion_workflow(self) -> Workflow:
        return self.create_workflow(WorkflowType.TREATMENT_COMPLETION)

    def create_file_upload_workflow(self, file_count: int) -> Workflow:
        return self.create_workflow(WorkflowType.FILE_UPLOAD, file_count=file_count)

    async def execute_workflow(
        self,
        workflow_id: str,
        on_step_complete: StepCallback | None = None,
    ) -> bool:
        """Run a registered workflow's steps in order.

        Args:
            workflow_id: Id returned by one of the create methods.
            on_step_complete: Called with (step, workflow) after each
                completed step.

        Returns:
            True if every step completed. False if a step failed, the
            callback raised, or the id is unknown (in which case nothing
            is touched).
        """
        workflow = self.registry.get(workflow_id)
        if workflow is None:
            self._logger.warning("Unknown workflow %s", workflow_id)
            return False

        workflow.status = WorkflowStatus.IN_PROGRESS
        workflow.start_time = datetime.now()

        try:
            for index, step in enumerate(workflow.steps):
                workflow.current_step = index
                step.status = StepStatus.IN_PROGRESS
                step.timestamp = datetime.now()

                await self.fault_policy.pause(step.planned_duration_ms)

                if self.fault_policy.should_fail():
                    step.status = StepStatus.FAILED
                    workflow.status = WorkflowStatus.FAILED
                    workflow.end_time = datetime.now()
                    self._logger.info(
                        "Workflow %s failed at step %s", workflow.id, step.id
                    )
                    return False

                step.status = StepStatus.COMPLETED
                if on_step_complete:
                    on_step_complete(step, workflow)
        except Exception:
            self._logger.exception("Error executing workflow %s", workflow.id)
            workflow.status = WorkflowStatus.FAILED
            workflow.end_time = datetime.now()
            return False

        workflow.status = WorkflowStatus.COMPLETED
        workflow.end_time = datetime.now()
        self._logger.debug("Workflow %s completed", workflow.id)
        return True

    def get_workflow(self, workflow_id: str) -> Workflow | None:
        return self.registry.get(workflow_id)

    def get_active_workflows(self) -> list[Workflow]:
        return self.registry.values()

    def cleanup_completed_workflows(self) -> int:
        """Drop every completed or failed workflow from the registry.

        Returns:
            Number of workflows removed.
        """
        removed = 0
        for workflow_id in self.registry:
            workflow = self.registry.get(workflow_id)
            if workflow is not None and workflow.is_finished:
                self.registry.remove(workflow_id)
                removed += 1
        return removed
