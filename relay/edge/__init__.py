"""Edge-function adapter."""

from relay.edge.handler import lambda_handler

__all__ = ["lambda_handler"]
