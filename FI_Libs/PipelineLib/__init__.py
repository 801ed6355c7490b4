"""
PipelineLib - Operator pipeline sessions

This module scopes a sequence of operator invocations to one image and
guarantees the image is released when the session ends.
"""

from FI_Libs.PipelineLib.pipeline_context import (
    NOT_HANDLED,
    OperatorInvocation,
    PipelineSession,
    PipelineContext,
)

__all__ = [
    "NOT_HANDLED",
    "OperatorInvocation",
    "PipelineSession",
    "PipelineContext",
]
