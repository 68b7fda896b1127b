"""
Provisioning services and the deployment pipeline
"""

from sitedeploy.services.origin_provisioner import OriginProvisioner, website_endpoint
from sitedeploy.services.content_publisher import ContentPublisher, get_content_type, walk_content
from sitedeploy.services.edge_provisioner import EdgeProvisioner
from sitedeploy.services.name_provisioner import NameProvisioner, CLOUDFRONT_HOSTED_ZONE_ID
from sitedeploy.services.rollback import RollbackPlan, RollbackReport, RollbackOutcome
from sitedeploy.services.deployment_orchestrator import DeploymentOrchestrator, OrchestratorError

__all__ = [
    # S3 origin
    "OriginProvisioner",
    "website_endpoint",
    # Content upload
    "ContentPublisher",
    "get_content_type",
    "walk_content",
    # CloudFront
    "EdgeProvisioner",
    # Route53
    "NameProvisioner",
    "CLOUDFRONT_HOSTED_ZONE_ID",
    # Rollback
    "RollbackPlan",
    "RollbackReport",
    "RollbackOutcome",
    # Pipeline orchestrator
    "DeploymentOrchestrator",
    "OrchestratorError",
]
