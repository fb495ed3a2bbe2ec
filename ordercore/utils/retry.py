# ordercore/utils/retry.py
import requests
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ordercore.domain.errors import ConflictError, InternalError
from ordercore.utils.settings import CONFLICT_RETRY_ATTEMPTS
from ordercore.utils.logging import get_logger

logger = get_logger(__name__)


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def _escalate_conflict(state: RetryCallState):
    exc = state.outcome.exception()
    logger.error(
        f"Conflict nie ustapil po {state.attempt_number} probach: {exc}"
    )
    raise InternalError("operation could not be completed, please retry") from exc


def conflict_retry(attempts: int | None = None):
    """
    Ponawia cala operacje (nowa transakcja) przy ConflictError.
    Po wyczerpaniu prob konflikt zamienia sie w InternalError.
    """
    return retry(
        stop=stop_after_attempt(attempts or CONFLICT_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
        retry=retry_if_exception_type(ConflictError),
        retry_error_callback=_escalate_conflict,
    )
