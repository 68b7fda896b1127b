"""
Input validation utilities for domains, project names and content folders
"""

import os
import re
from pathlib import Path
from typing import Union

from sitedeploy.api.exceptions import ValidationError


class DomainValidator:
    """Validator for domain names"""

    # RFC-compliant domain regex
    DOMAIN_REGEX = re.compile(
        r'^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}$'
    )

    @classmethod
    def validate(cls, domain: str) -> str:
        """
        Validate a domain name.

        Args:
            domain: Domain name to validate

        Returns:
            Cleaned domain name (lowercase, no scheme, no trailing dot or slash)

        Raises:
            ValidationError: If domain is invalid
        """
        if not domain or not domain.strip():
            raise ValidationError("Domain name cannot be empty")

        domain = domain.strip().lower()
        domain = re.sub(r'^https?://', '', domain)
        domain = domain.rstrip('/').rstrip('.')

        if len(domain) > 253:  # RFC 1035
            raise ValidationError("Domain name too long (max 253 characters)")

        if not cls.DOMAIN_REGEX.match(domain):
            raise ValidationError(
                f"Invalid domain format: {domain}. "
                "Domain must contain only letters, numbers, hyphens and dots."
            )

        return domain


class ProjectNameValidator:
    """
    Validator for project names.
    The name becomes the left-most label of "<name>.<domain>", which is both
    the bucket name and the CloudFront alias, so it must be a DNS label.
    """

    LABEL_REGEX = re.compile(r'^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$')

    @classmethod
    def validate(cls, name: str) -> str:
        if not name or not name.strip():
            raise ValidationError("Project name cannot be empty")

        name = name.strip().lower()

        if not cls.LABEL_REGEX.match(name):
            raise ValidationError(
                f"Invalid project name: {name}. "
                "Use 1-63 lowercase letters, numbers and hyphens "
                "(no leading or trailing hyphen)."
            )

        return name


def validate_bucket_name(name: str) -> str:
    """
    S3 bucket names are 3-63 characters; "<project>.<domain>" can exceed that
    even when both halves are valid on their own.
    """
    if not 3 <= len(name) <= 63:
        raise ValidationError(
            f"Origin name '{name}' must be between 3 and 63 characters "
            f"(got {len(name)}). Choose a shorter project name."
        )
    return name


def validate_content_root(path: Union[str, Path]) -> Path:
    """
    Check that the content root is an existing, readable directory.

    Returns:
        Resolved path
    """
    if not str(path).strip():
        raise ValidationError("Content folder cannot be empty")

    root = Path(path).expanduser().resolve()

    if not root.exists():
        raise ValidationError(f"Content folder not found: {root}")
    if not root.is_dir():
        raise ValidationError(f"Content path is not a directory: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise ValidationError(f"Content folder is not readable: {root}")

    return root


def validate_domain(domain: str) -> str:
    """Convenience function for domain validation"""
    return DomainValidator.validate(domain)


def validate_project_name(name: str) -> str:
    """Convenience function for project name validation"""
    return ProjectNameValidator.validate(name)
