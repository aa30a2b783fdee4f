"""Stake-and-mint pipeline and its result values."""

from relay.pipeline.processor import StakeAndMintProcessor, TokenKind
from relay.pipeline.reporter import ResultReporter
from relay.pipeline.results import Error, ErrorCode, PipelineResult, Success

__all__ = [
    "Error",
    "ErrorCode",
    "PipelineResult",
    "ResultReporter",
    "StakeAndMintProcessor",
    "Success",
    "TokenKind",
]
