"""Conversion of SDK ApiException errors to provider exceptions."""
from typing import Any, Callable

from ibm_cloud_sdk_core import ApiException
from requests.exceptions import RequestException

from ibmrp.providers.ibm.exceptions import (
    IBMAuthorizationError,
    IBMCloudError,
    IBMRateLimitError,
    IBMResourceGoneError,
    IBMResourceNotFoundError,
    IBMValidationError,
)


def convert_api_exception(error: ApiException, operation_name: str = "unknown") -> IBMCloudError:
    """Convert an SDK ApiException to a provider exception by status code."""
    code = error.code
    detail = str(error.message)
    message = f"Error {operation_name}: {detail} (status {code})"

    if code == 404 or "Object not found" in detail:
        return IBMResourceNotFoundError(message, status_code=404)
    if code == 410 or "Gone" in detail:
        return IBMResourceGoneError(message, status_code=410)
    if code in (401, 403):
        return IBMAuthorizationError(message, status_code=code)
    if code == 429:
        return IBMRateLimitError(message, status_code=code)
    if code in (400, 422):
        return IBMValidationError(message, status_code=code)
    return IBMCloudError(message, status_code=code)


def call_api(operation_name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """
    Call an SDK method and return its decoded result body.

    Args:
        operation_name: Description used in error messages, e.g. "getting deployment info"
        func: SDK method
        *args: Positional arguments for the method
        **kwargs: Keyword arguments for the method

    Raises:
        IBMCloudError: Converted from ApiException, or wrapping a transport error
    """
    try:
        response = func(*args, **kwargs)
    except ApiException as e:
        raise convert_api_exception(e, operation_name) from e
    except RequestException as e:
        raise IBMCloudError(f"Error {operation_name}: {e}") from e
    return response.get_result() if hasattr(response, "get_result") else response
