"""Pydantic models and fixed user-facing messages for the API.

Models:
    - SolveResponse: Answer returned by POST /solve
"""

from shniro.models.schemas import SolveResponse

__all__ = ["SolveResponse"]
