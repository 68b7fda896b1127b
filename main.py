"""
Main CLI Entry Point
Command-line interface for:
- Deploying a static build folder to S3 + CloudFront + Route53
- Tearing down resources left behind by an earlier run
"""

import sys
import argparse
from pathlib import Path

from pydantic import ValidationError as SettingsError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from sitedeploy.api import ProvisioningError, create_provider_clients
from sitedeploy.models import DeploymentRequest
from sitedeploy.services import DeploymentOrchestrator, OrchestratorError
from sitedeploy.utils.config import get_settings
from sitedeploy.utils.logger import configure_logging, get_logger
from sitedeploy.utils.validators import validate_domain, validate_project_name

logger = get_logger(__name__)
console = Console()


def _load_settings(args):
    """Load settings and apply command-line overrides"""
    try:
        settings = get_settings()
    except SettingsError as e:
        # Logging is configured from settings, so report on the console
        console.print(f"[bold red]❌ Invalid configuration:[/bold red] {e}")
        sys.exit(1)

    if getattr(args, "region", None):
        settings = settings.model_copy(update={"aws_region": args.region.strip()})
    if getattr(args, "cert_arn", None):
        settings = settings.model_copy(update={"ssl_cert_arn": args.cert_arn.strip()})

    configure_logging(
        level=settings.log_level,
        log_dir=settings.log_dir if settings.log_to_file else None,
    )
    return settings


def _ask(value, prompt):
    """Return the flag value, or ask for it interactively"""
    if value and value.strip():
        return value.strip()
    return Prompt.ask(f"[cyan]{prompt}[/cyan]").strip()


def _print_left_in_place(report):
    if report.left_in_place:
        console.print("[bold red]Resources left in place (remove manually):[/bold red]")
        for description in report.left_in_place:
            console.print(f"  - {description}")


def cmd_deploy(args):
    """Deploy a static site"""
    settings = _load_settings(args)

    try:
        name = validate_project_name(_ask(args.name, "Project name"))
        domain = validate_domain(_ask(args.domain, "Base domain (e.g. example.com)"))
        content_root = Path(_ask(args.content, "Path to build folder"))
    except ProvisioningError as e:
        logger.error(f"❌ Invalid input: {str(e)}")
        sys.exit(1)

    if not settings.ssl_cert_arn:
        logger.error("❌ SSL_CERT_ARN is not set. Export it or pass --cert-arn.")
        sys.exit(1)

    request = DeploymentRequest(
        name=name,
        domain=domain,
        content_root=content_root,
        certificate_arn=settings.ssl_cert_arn,
        region=settings.aws_region,
    )

    try:
        orchestrator = DeploymentOrchestrator(create_provider_clients(settings), settings)
        result = orchestrator.deploy(request)
    except OrchestratorError as e:
        logger.error(f"❌ Deployment failed: {str(e)}")
        _print_left_in_place(e.rollback)
        sys.exit(1)
    except Exception as e:
        # Pre-flight failures and botocore session errors
        logger.error(f"❌ Deployment failed: {str(e)}")
        sys.exit(1)

    table = Table(show_header=False, box=None)
    table.add_row("[cyan]Bucket:[/cyan]", result.origin_name)
    table.add_row("[cyan]Website endpoint:[/cyan]", result.website_url)
    table.add_row("[cyan]Distribution ID:[/cyan]", result.distribution_id)
    table.add_row("[cyan]Distribution domain:[/cyan]", result.distribution_domain)
    table.add_row("[cyan]DNS record:[/cyan]", result.record_name)
    table.add_row("[cyan]Files uploaded:[/cyan]", f"{result.files_published} ({result.bytes_published} bytes)")

    console.print(Panel(
        table,
        title=f"[bold green]✅ Live at {result.url}[/bold green]",
        border_style="green"
    ))

    if args.wait:
        if not orchestrator.edge.wait_until_deployed(
            result.distribution_id,
            timeout_seconds=settings.edge_wait_timeout_seconds,
        ):
            console.print("[yellow]Distribution is still deploying; it will finish on its own.[/yellow]")


def cmd_teardown(args):
    """Delete a distribution and/or bucket left behind by an earlier run"""
    if not args.origin and not args.distribution_id:
        logger.error("❌ Nothing to tear down: pass --origin and/or --distribution-id")
        sys.exit(1)

    settings = _load_settings(args)

    try:
        orchestrator = DeploymentOrchestrator(create_provider_clients(settings), settings)
    except Exception as e:
        logger.error(f"❌ Teardown failed: {str(e)}")
        sys.exit(1)

    report = orchestrator.destroy(origin_name=args.origin, distribution_id=args.distribution_id)

    if not report.succeeded:
        _print_left_in_place(report)
        sys.exit(1)

    console.print("[bold green]✅ Teardown complete[/bold green]")


def build_parser():
    parser = argparse.ArgumentParser(
        description="Static site deployment CLI (S3 + CloudFront + Route53)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Deploy ./dist to https://myblog.example.com
  python main.py deploy --name myblog --domain example.com --content ./dist

  # Deploy interactively and wait for CloudFront to finish
  python main.py deploy --wait

  # Remove a distribution and its bucket
  python main.py teardown --distribution-id E2ABCDEF123 --origin myblog.example.com
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ==================== DEPLOY COMMAND ====================
    deploy_parser = subparsers.add_parser("deploy", help="Deploy a static build folder")
    deploy_parser.add_argument("--name", help="Project name (subdomain label)")
    deploy_parser.add_argument("--domain", help="Base domain with an existing Route53 hosted zone")
    deploy_parser.add_argument("--content", help="Path to the build folder")
    deploy_parser.add_argument("--cert-arn", help="ACM certificate ARN (default: SSL_CERT_ARN)")
    deploy_parser.add_argument("--region", help="Bucket region (default: AWS_REGION)")
    deploy_parser.add_argument("--wait", action="store_true", help="Wait for the distribution to deploy")
    deploy_parser.set_defaults(func=cmd_deploy)

    # ==================== TEARDOWN COMMAND ====================
    teardown_parser = subparsers.add_parser("teardown", help="Delete resources from an earlier run")
    teardown_parser.add_argument("--origin", help="Bucket name, e.g. myblog.example.com")
    teardown_parser.add_argument("--distribution-id", help="CloudFront distribution ID")
    teardown_parser.add_argument("--region", help="Bucket region (default: AWS_REGION)")
    teardown_parser.set_defaults(func=cmd_teardown)

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    args.func(args)


if __name__ == "__main__":
    main()
