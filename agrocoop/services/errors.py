"""
Action error types and the boundary that turns them into results.

Inside the service layer failures are raised; at the edge of every public
action they are converted into ``ActionResult(success=False, ...)`` so no
exception reaches the request handler under expected failure conditions.
"""
import functools
import logging
from typing import Dict, List

from pydantic import ValidationError

from agrocoop.schemas.result import ActionResult

logger = logging.getLogger(__name__)


class ActionError(Exception):
    """A handled failure whose message is safe to show to the user."""


class NotFoundError(ActionError):
    pass


class PermissionDeniedError(ActionError):
    pass


class ConflictError(ActionError):
    """Insufficient stock, duplicate allocation, concurrent modification."""


def _field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        key = ".".join(str(part) for part in err["loc"]) or "__root__"
        errors.setdefault(key, []).append(err["msg"])
    return errors


def action(label: str):
    """
    Decorate a service function so it always returns an ActionResult.

    ``label`` names the operation in log lines, e.g. "adding task".
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> ActionResult:
            try:
                return func(*args, **kwargs)
            except ValidationError as exc:
                logger.warning("Validation failed while %s: %s", label, exc.errors())
                return ActionResult.fail("Validation failed.", field_errors=_field_errors(exc))
            except ActionError as exc:
                logger.warning("Error %s: %s", label, exc)
                return ActionResult.fail(str(exc))
            except Exception as exc:
                logger.exception("Unexpected error %s", label)
                return ActionResult.fail(str(exc) or "An unknown error occurred.")
        return wrapper
    return decorator
