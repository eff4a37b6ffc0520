"""Request-scoped helpers shared by v1 endpoints"""

from fastapi import HTTPException, Request


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def enforce_range(name: str, value, minimum=None, maximum=None) -> None:
    """Reject values outside the configured structural limits before calling the engine"""
    if minimum is not None and value < minimum:
        raise HTTPException(status_code=422, detail=f"{name} must be at least {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise HTTPException(status_code=422, detail=f"{name} must be at most {maximum}, got {value}")
