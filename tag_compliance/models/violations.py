# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Violation data model."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import ViolationType


class Violation(BaseModel):
    """A single typed reason a resource failed its tag criteria."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "kind": "missing_required_tag",
                "message": "Missing required tag 'Project'",
                "tag_key": "Project",
            }
        },
    )

    kind: ViolationType = Field(..., description="Kind of violation")
    message: str = Field(..., description="Human-readable explanation")
    tag_key: str | None = Field(
        None, description="Tag key the violation concerns (None for count rules)"
    )
