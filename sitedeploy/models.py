"""
Deployment data model: the immutable request, the per-run mutable state
and the result handed back on success.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class DeploymentStage(str, Enum):
    """Stages of one deployment run"""
    INIT = "init"
    ORIGIN_READY = "origin_ready"
    CONTENT_PUBLISHED = "content_published"
    EDGE_READY = "edge_ready"
    NAME_READY = "name_ready"
    ROLLING_BACK = "rolling_back"
    FAILED = "failed"


PIPELINE_STAGES = (
    DeploymentStage.ORIGIN_READY,
    DeploymentStage.CONTENT_PUBLISHED,
    DeploymentStage.EDGE_READY,
    DeploymentStage.NAME_READY,
)

TERMINAL_STAGES = {DeploymentStage.NAME_READY, DeploymentStage.FAILED}

ALLOWED_TRANSITIONS = {
    DeploymentStage.INIT: {DeploymentStage.ORIGIN_READY, DeploymentStage.ROLLING_BACK},
    DeploymentStage.ORIGIN_READY: {DeploymentStage.CONTENT_PUBLISHED, DeploymentStage.ROLLING_BACK},
    DeploymentStage.CONTENT_PUBLISHED: {DeploymentStage.EDGE_READY, DeploymentStage.ROLLING_BACK},
    DeploymentStage.EDGE_READY: {DeploymentStage.NAME_READY, DeploymentStage.ROLLING_BACK},
    DeploymentStage.ROLLING_BACK: {DeploymentStage.FAILED},
}


class InvalidStageTransition(Exception):
    pass


@dataclass(frozen=True)
class DeploymentRequest:
    """
    Immutable input of one deployment run.

    The origin bucket and the CloudFront alias are both "<name>.<domain>".
    """
    name: str
    domain: str
    content_root: Path
    certificate_arn: str
    region: str

    @property
    def origin_name(self) -> str:
        return f"{self.name}.{self.domain}"

    @property
    def alias_host(self) -> str:
        return self.origin_name


@dataclass
class DeploymentState:
    """
    Mutable bookkeeping for a single run, owned by the orchestrator.

    ``origin_created`` / ``edge_created`` are only set once the provider has
    confirmed the creation; rollback acts on nothing else.
    """
    origin_created: bool = False
    edge_created: bool = False
    edge_id: Optional[str] = None
    origin_endpoint: Optional[str] = None
    edge_domain: Optional[str] = None
    zone_id: Optional[str] = None
    record_name: Optional[str] = None
    files_published: int = 0
    bytes_published: int = 0
    stage: DeploymentStage = DeploymentStage.INIT
    failed_step: Optional[DeploymentStage] = None

    def transition(self, new_stage: DeploymentStage) -> None:
        if new_stage not in ALLOWED_TRANSITIONS.get(self.stage, set()):
            raise InvalidStageTransition(
                f"Cannot transition from {self.stage.value} to {new_stage.value}"
            )
        self.stage = new_stage

    def fail(self, step: DeploymentStage) -> None:
        """Record the step that failed and enter rollback."""
        self.failed_step = step
        self.transition(DeploymentStage.ROLLING_BACK)


@dataclass(frozen=True)
class DeploymentResult:
    """Outcome of a successful run"""
    origin_name: str
    origin_endpoint: str
    distribution_id: str
    distribution_domain: str
    record_name: str
    zone_id: str
    files_published: int
    bytes_published: int
    origin_created: bool
    edge_created: bool

    @property
    def website_url(self) -> str:
        return f"http://{self.origin_endpoint}"

    @property
    def url(self) -> str:
        return f"https://{self.record_name.rstrip('.')}"


@dataclass(frozen=True)
class ContentFile:
    """One file of the local content tree"""
    relative_path: str
    absolute_path: Path
    size_bytes: int = field(default=0)
