from __future__ import annotations  # Re-export response_gateway public API

from .errors import GatewayBusyError, GatewayError, GatewayErrorKind, classify_error
from .response_gateway import ResponseGateway

__all__ = ["GatewayBusyError", "GatewayError", "GatewayErrorKind", "ResponseGateway", "classify_error"]
