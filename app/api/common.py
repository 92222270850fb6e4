"""
Shared helpers for API endpoints.
"""

from typing import Any, Dict, Optional

from app.core.logging import get_trace_id


def standard_response(
    message: str,
    data: Optional[Dict[str, Any]] = None,
    **proofs: Any
) -> Dict[str, Any]:
    """Build standard response format."""
    trace_id = get_trace_id()
    proof_data = {"trace_id": None if trace_id == "-" else trace_id}
    proof_data.update({k: v for k, v in proofs.items() if v is not None})
    return {
        "message": message,
        "data": data or {},
        "proofs": proof_data,
    }


def short_trace() -> str:
    """First 8 characters of the trace id, for log prefixes."""
    return get_trace_id()[:8]
