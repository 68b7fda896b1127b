"""
Deployment Orchestrator
Combines OriginProvisioner, ContentPublisher, EdgeProvisioner and
NameProvisioner into a single pipeline that takes a local build folder to a
live HTTPS subdomain, and undoes whatever it created if any step fails.
"""

from typing import Callable, Optional, Sequence, Tuple

from sitedeploy.api.exceptions import ValidationError
from sitedeploy.api.provider_factory import ProviderClients
from sitedeploy.models import (
    DeploymentRequest,
    DeploymentResult,
    DeploymentStage,
    DeploymentState,
)
from sitedeploy.services.content_publisher import ContentPublisher, content_size
from sitedeploy.services.edge_provisioner import EdgeProvisioner
from sitedeploy.services.name_provisioner import NameProvisioner
from sitedeploy.services.origin_provisioner import OriginProvisioner
from sitedeploy.services.rollback import RollbackPlan, RollbackReport
from sitedeploy.utils.config import MIB, Settings
from sitedeploy.utils.logger import get_logger
from sitedeploy.utils.validators import (
    validate_bucket_name,
    validate_content_root,
    validate_domain,
    validate_project_name,
)

logger = get_logger(__name__)


Step = Callable[[DeploymentRequest, DeploymentState, RollbackPlan], None]


class OrchestratorError(Exception):
    """
    Raised when a deployment run fails after it started touching the cloud.

    The message is the original failure and ``__cause__`` is the original
    exception; rollback problems are only reported through ``rollback``.
    """

    def __init__(
        self,
        message: str,
        stage: Optional[DeploymentStage] = None,
        rollback: Optional[RollbackReport] = None,
    ):
        super().__init__(message)
        self.stage = stage
        self.rollback = rollback or RollbackReport()

    @property
    def original(self) -> Optional[BaseException]:
        return self.__cause__


class DeploymentOrchestrator:
    """
    End-to-end static-site deployment with compensating rollback.

    Runs, in order:

    1. Ensure the S3 origin exists and serves a public website
    2. Upload the content folder to the origin
    3. Create the CloudFront distribution in front of the origin
    4. Point ``<name>.<domain>`` at the distribution in Route53

    Every resource created by the run is registered on a RollbackPlan the
    moment the provider confirms it. If a later step fails, the plan tears
    those resources down newest-first. Pre-existing origins and the objects
    uploaded into them are left alone.
    """

    def __init__(
        self,
        clients: ProviderClients,
        config: Settings,
        origin: Optional[OriginProvisioner] = None,
        publisher: Optional[ContentPublisher] = None,
        edge: Optional[EdgeProvisioner] = None,
        names: Optional[NameProvisioner] = None,
    ):
        """
        Args:
            clients: Object store, CDN and DNS clients
            config: Settings shared by every provisioner
            origin, publisher, edge, names: Optional pre-built provisioners
        """
        self.config = config
        self.origin = origin or OriginProvisioner(clients.object_store, config)
        self.publisher = publisher or ContentPublisher(clients.object_store, max_workers=config.upload_workers)
        self.edge = edge or EdgeProvisioner(clients.cdn, config)
        self.names = names or NameProvisioner(clients.dns)

    def _pipeline(self) -> Sequence[Tuple[DeploymentStage, str, Step]]:
        return (
            (DeploymentStage.ORIGIN_READY, "Ensuring S3 website origin", self._provision_origin),
            (DeploymentStage.CONTENT_PUBLISHED, "Uploading content", self._publish_content),
            (DeploymentStage.EDGE_READY, "Creating CloudFront distribution", self._provision_edge),
            (DeploymentStage.NAME_READY, "Pointing Route53 to CloudFront", self._provision_name),
        )

    def validate(self, request: DeploymentRequest) -> None:
        """
        Pre-flight checks. Makes no external calls.

        Raises:
            ValidationError: On any invalid field or an oversized content folder
        """
        for field_name in ("name", "domain", "certificate_arn", "region"):
            if not str(getattr(request, field_name) or "").strip():
                raise ValidationError(f"Deployment request field '{field_name}' cannot be empty")

        if validate_project_name(request.name) != request.name:
            raise ValidationError(f"Project name must be lowercase and trimmed: {request.name!r}")
        if validate_domain(request.domain) != request.domain:
            raise ValidationError(f"Domain must be lowercase without scheme or trailing dot: {request.domain!r}")
        validate_bucket_name(request.origin_name)

        if request.region != self.config.aws_region:
            raise ValidationError(
                f"Request region {request.region} does not match the configured "
                f"client region {self.config.aws_region}"
            )

        root = validate_content_root(request.content_root)
        try:
            size = content_size(root)
        except OSError as e:
            raise ValidationError(f"Content folder is not fully readable: {e}") from e
        limit = self.config.max_upload_size_bytes
        if size > limit:
            raise ValidationError(
                f"Build folder exceeds max allowed size "
                f"({size / MIB:.2f} MB > {limit / MIB:.2f} MB)"
            )

        logger.info(f"Pre-flight OK: {root} ({size / MIB:.2f} MB)")

    def deploy(self, request: DeploymentRequest) -> DeploymentResult:
        """
        Run the complete deployment pipeline.

        Args:
            request: What to deploy and where

        Returns:
            DeploymentResult describing the live site

        Raises:
            ValidationError: If pre-flight checks fail (nothing was touched)
            OrchestratorError: If a step failed; rollback has already run
        """
        logger.info(f"🚀 Starting deployment of {request.origin_name}")
        logger.info(f"   Content: {request.content_root}")
        logger.info(f"   Region:  {request.region}")

        self.validate(request)

        state = DeploymentState()
        plan = RollbackPlan()
        pipeline = self._pipeline()

        try:
            with plan:
                for index, (stage, label, step) in enumerate(pipeline, start=1):
                    logger.info(f"── Step {index}/{len(pipeline)}: {label}")
                    try:
                        step(request, state, plan)
                    except BaseException:
                        state.fail(stage)
                        raise
                    state.transition(stage)
        except Exception as exc:
            state.transition(DeploymentStage.FAILED)
            logger.error(f"❌ Deployment failed at {state.failed_step.value}: {exc}")
            raise OrchestratorError(str(exc), stage=state.failed_step, rollback=plan.report) from exc

        result = DeploymentResult(
            origin_name=request.origin_name,
            origin_endpoint=state.origin_endpoint,
            distribution_id=state.edge_id,
            distribution_domain=state.edge_domain,
            record_name=state.record_name,
            zone_id=state.zone_id,
            files_published=state.files_published,
            bytes_published=state.bytes_published,
            origin_created=state.origin_created,
            edge_created=state.edge_created,
        )
        logger.info(f"🎉 Your site is live at {result.url} (CloudFront may still be deploying)")
        return result

    def destroy(self, origin_name: Optional[str] = None, distribution_id: Optional[str] = None) -> RollbackReport:
        """
        Tear down a distribution and/or origin left behind by an earlier run,
        using the same compensating actions (and ordering) as rollback.
        """
        plan = RollbackPlan()
        if origin_name:
            plan.push(f"S3 bucket {origin_name}", lambda: self.origin.teardown(origin_name))
        if distribution_id:
            plan.push(f"CloudFront distribution {distribution_id}", lambda: self.edge.teardown(distribution_id))
        return plan.execute()

    # ------------------------------------------------------------------ #
    #  Pipeline steps                                                      #
    # ------------------------------------------------------------------ #

    def _provision_origin(self, request: DeploymentRequest, state: DeploymentState, plan: RollbackPlan) -> None:
        def on_created(name: str) -> None:
            state.origin_created = True
            plan.push(f"S3 bucket {name}", lambda: self.origin.teardown(name))

        endpoint, _ = self.origin.ensure(request.origin_name, on_created=on_created)
        state.origin_endpoint = endpoint

    def _publish_content(self, request: DeploymentRequest, state: DeploymentState, plan: RollbackPlan) -> None:
        files, size = self.publisher.publish(request.content_root, request.origin_name)
        state.files_published = files
        state.bytes_published = size

    def _provision_edge(self, request: DeploymentRequest, state: DeploymentState, plan: RollbackPlan) -> None:
        domain_name, distribution_id = self.edge.create(
            request.alias_host,
            state.origin_endpoint,
            request.certificate_arn,
        )
        state.edge_created = True
        state.edge_id = distribution_id
        state.edge_domain = domain_name
        plan.push(
            f"CloudFront distribution {distribution_id}",
            lambda: self.edge.teardown(distribution_id),
        )

    def _provision_name(self, request: DeploymentRequest, state: DeploymentState, plan: RollbackPlan) -> None:
        state.zone_id = self.names.find_zone(request.domain)
        state.record_name = self.names.upsert_alias(
            state.zone_id,
            request.name,
            request.domain,
            state.edge_domain,
        )
