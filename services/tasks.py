from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, wait
from typing import List, Sequence, TypeVar

T = TypeVar("T")


def wait_all(futures: Sequence[Future[T]]) -> List[T]:
    """Block until every future is done and return results in input order.

    On the first failure the futures that have not started are cancelled and
    the original exception is re-raised. Futures already running are waited
    for so no worker outlives the phase.
    """

    done, pending = wait(futures, return_when=FIRST_EXCEPTION)
    failed = next((f for f in futures if f in done and f.exception() is not None), None)
    if failed is None:
        return [future.result() for future in futures]

    for future in pending:
        future.cancel()
    wait(pending)
    raise failed.exception()  # type: ignore[misc]
