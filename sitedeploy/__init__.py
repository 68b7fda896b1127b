"""
sitedeploy - publish a static site to S3 + CloudFront + Route53
"""

__version__ = "1.0.0"
