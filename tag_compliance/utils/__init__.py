"""Utility modules for the tag compliance engine."""

from .aws_regions import VALID_AWS_REGIONS, is_valid_region, sorted_regions

__all__ = [
    "VALID_AWS_REGIONS",
    "is_valid_region",
    "sorted_regions",
]
