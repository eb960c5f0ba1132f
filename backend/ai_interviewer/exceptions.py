"""
Error taxonomy for the question generation / scoring pipeline.

Nothing in the pipeline retries; every failure propagates to the caller with
enough detail (status code, offending text, missing field names) to log it.
"""
from __future__ import annotations
from typing import Iterable, Optional


class InterviewPipelineError(Exception):
    """Base class for every error raised by the interview pipeline."""


class ConfigurationError(InterviewPipelineError):
    """Missing or invalid configuration, e.g. no API credential."""


class ModelClientError(InterviewPipelineError):
    """The hosted completion API could not produce a usable completion."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ModelClientError):
    """The remote service answered HTTP 429."""


class TransportError(ModelClientError):
    """Network failure or non-success HTTP status."""


class ModelTimeoutError(TransportError):
    """The outbound request exceeded its timeout."""


class ProtocolError(ModelClientError):
    """The response body is not the expected chat-completion envelope."""


class ResponseError(InterviewPipelineError):
    """The model produced unusable or non-conforming output."""


class NoJsonFoundError(ResponseError):
    """No brace-delimited JSON object could be located in the completion."""


class MalformedJsonError(ResponseError):
    def __init__(self, message: str, text: str = ""):
        super().__init__(message)
        # Candidate text after the repair pass, kept for diagnostics
        self.text = text


class SchemaError(ResponseError):
    def __init__(self, message: str, missing_fields: Iterable[str] = ()):
        super().__init__(message)
        self.missing_fields = list(missing_fields)
