# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Recognized AWS region codes."""

VALID_AWS_REGIONS: frozenset[str] = frozenset(
    {
        "us-east-1",
        "us-east-2",
        "us-west-1",
        "us-west-2",
        "ca-central-1",
        "eu-central-1",
        "eu-west-1",
        "eu-west-2",
        "eu-west-3",
        "eu-north-1",
        "ap-northeast-1",
        "ap-northeast-2",
        "ap-southeast-1",
        "ap-southeast-2",
        "ap-south-1",
        "sa-east-1",
        "me-south-1",
        "af-south-1",
    }
)


def is_valid_region(region: str) -> bool:
    """Check whether a region code is recognized."""
    return region in VALID_AWS_REGIONS


def sorted_regions() -> list[str]:
    """All recognized regions in a stable order (used for 'all' mode)."""
    return sorted(VALID_AWS_REGIONS)
