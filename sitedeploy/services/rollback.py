"""
Rollback Plan
A stack of compensating actions built while resources are created and
unwound in reverse order when the deployment fails.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from sitedeploy.utils.logger import get_logger

logger = get_logger(__name__)


# A compensating action returns False (or raises) when it could not undo its resource
CompensatingAction = Callable[[], Optional[bool]]


@dataclass(frozen=True)
class RollbackOutcome:
    """Result of one compensating action"""
    description: str
    succeeded: bool
    error: Optional[str] = None


@dataclass
class RollbackReport:
    """What rollback did, in execution order"""
    outcomes: List[RollbackOutcome] = field(default_factory=list)

    @property
    def executed(self) -> bool:
        return bool(self.outcomes)

    @property
    def succeeded(self) -> bool:
        return all(outcome.succeeded for outcome in self.outcomes)

    @property
    def left_in_place(self) -> List[str]:
        """Resources rollback could not remove"""
        return [outcome.description for outcome in self.outcomes if not outcome.succeeded]


class RollbackPlan:
    """
    LIFO stack of compensating actions.

    Used as a context manager, the plan unwinds automatically when the block
    exits with an exception and is discarded when the block completes:

        with RollbackPlan() as plan:
            create_origin()
            plan.push("S3 bucket x", lambda: delete_origin())
            ...

    Unwinding never raises; the exception that triggered it keeps propagating.
    """

    def __init__(self):
        self._actions: List[Tuple[str, CompensatingAction]] = []
        self.report = RollbackReport()

    def push(self, description: str, action: CompensatingAction) -> None:
        """Register the compensating action for a resource that was just created."""
        logger.debug(f"Rollback registered: {description}")
        self._actions.append((description, action))

    @property
    def descriptions(self) -> List[str]:
        """Pending actions in the order they would run"""
        return [description for description, _ in reversed(self._actions)]

    def __len__(self) -> int:
        return len(self._actions)

    def execute(self) -> RollbackReport:
        """
        Run every pending action, most recent first. Each action runs even if
        an earlier one failed. The stack is empty afterwards.
        """
        if not self._actions:
            logger.info("Nothing to roll back")
            return self.report

        logger.warning(f"Error occurred, starting rollback of {len(self._actions)} resource(s)...")

        while self._actions:
            description, action = self._actions.pop()
            try:
                result = action()
            except Exception as e:
                logger.error(f"❌ Rollback of {description} raised: {e}")
                self.report.outcomes.append(RollbackOutcome(description, False, str(e)))
                continue

            succeeded = result is not False
            if not succeeded:
                logger.error(f"❌ Rollback of {description} did not complete")
            self.report.outcomes.append(RollbackOutcome(description, succeeded))

        if self.report.succeeded:
            logger.info("✅ Rollback complete")
        else:
            logger.error(f"Rollback incomplete, left in place: {', '.join(self.report.left_in_place)}")

        return self.report

    def discard(self) -> None:
        """Drop pending actions after a successful run."""
        self._actions.clear()

    def __enter__(self) -> "RollbackPlan":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.discard()
        else:
            self.execute()
        return False
