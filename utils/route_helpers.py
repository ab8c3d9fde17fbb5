"""
Shared route helper utilities.

Maps referral flow errors onto HTTP responses so routes stay short.
"""
import logging
from typing import Any, Callable

from fastapi import HTTPException

from managers.referral_manager import ReferralError, UnknownReferralError


def referral_error_status(error: ReferralError) -> int:
    """HTTP status for a referral flow error"""
    if isinstance(error, UnknownReferralError):
        return 404
    return 400


def manager_operation(
    operation: Callable[..., Any],
    *args: Any,
    error_context: str = "operation",
) -> Any:
    """
    Execute a manager call with standard error handling.

    Args:
        operation: Manager method to call
        *args: Arguments for the call
        error_context: Context string for error logging

    Returns:
        Whatever the manager call returns

    Raises:
        HTTPException: 400/404 for referral errors, 500 for anything else
    """
    try:
        return operation(*args)
    except HTTPException:
        raise
    except ReferralError as e:
        raise HTTPException(status_code=referral_error_status(e), detail=str(e))
    except Exception as e:
        logging.error(f"Failed to {error_context}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
