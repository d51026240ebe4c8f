import functools
import inspect

import pytest
from google.api_core.exceptions import PermissionDenied


def skip_on_billing_error(func):
    """
    Decorator to skip tests if Google Cloud billing is not enabled.

    Works for both sync and async test functions.
    """

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except PermissionDenied as e:
                _skip_if_billing(e)
                raise

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PermissionDenied as e:
            _skip_if_billing(e)
            raise

    return wrapper


def _skip_if_billing(error: PermissionDenied) -> None:
    if "billing" in str(error).lower():
        pytest.skip(
            "Google Cloud Vision API requires billing to be enabled. "
            "Enable billing on your project or skip integration tests."
        )
