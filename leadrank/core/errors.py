"""Error type shared by every stage of the lead pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    UPSTREAM_REQUEST = "upstream_request"
    RESPONSE_SHAPE = "response_shape"
    RESPONSE_PARSE = "response_parse"
    OUTPUT_WRITE = "output_write"


class LeadRankError(RuntimeError):
    """Raised by any pipeline stage; ``kind`` tells callers how to react.

    ``status`` is the upstream HTTP status when there is one, and ``raw`` keeps
    the untouched upstream payload (response body or model text) for diagnostics.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status: Optional[int] = None,
        raw: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.status = status
        self.raw = raw
        text = message if status is None else f"{message} (status: {status})"
        super().__init__(f"{kind.value}: {text}")
