"""
Interval refetch for the staff boards.

``OrderPoller`` re-runs a fetch on a background scheduler until it is
stopped. Each fetch goes through ``call_with_retry``: a run that exceeds the
timeout is abandoned and tried again after a fixed back-off. When every
attempt fails the error is logged and the next tick proceeds as normal.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FetchTimeout
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from django.conf import settings

logger = logging.getLogger(__name__)


class FetchFailed(Exception):
    """Raised when every attempt of a fetch failed or timed out."""

    def __init__(self, attempts, last_error):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Fetch failed after {attempts} attempt(s): {last_error!r}")


def call_with_retry(func, retries=None, backoff=None, timeout=None, sleep=time.sleep):
    """
    Call ``func()`` and return its result.

    Makes up to ``retries + 1`` attempts. An attempt fails when ``func`` raises
    or runs longer than ``timeout`` seconds. Attempts are separated by
    ``backoff`` seconds. Defaults come from the ``MENU_FETCH_*`` settings.
    """
    retries = settings.MENU_FETCH_RETRIES if retries is None else retries
    backoff = settings.MENU_FETCH_BACKOFF if backoff is None else backoff
    timeout = settings.MENU_FETCH_TIMEOUT if timeout is None else timeout

    attempts = retries + 1
    last_error = None

    for attempt in range(1, attempts + 1):
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            return executor.submit(func).result(timeout=timeout)
        except FetchTimeout:
            last_error = FetchTimeout(f"timed out after {timeout}s")
            logger.warning("Fetch attempt %d/%d timed out after %ss", attempt, attempts, timeout)
        except Exception as e:
            last_error = e
            logger.warning("Fetch attempt %d/%d failed: %s", attempt, attempts, e)
        finally:
            # A timed-out call keeps running; it is not waited for
            executor.shutdown(wait=False)

        if attempt < attempts and backoff:
            sleep(backoff)

    raise FetchFailed(attempts, last_error)


class OrderPoller:
    """
    Run ``fetch`` every ``interval`` seconds and hand results to ``on_result``.

    Use ``start()``/``stop()`` or a ``with`` block; leaving the block stops
    the poller. The first fetch happens immediately on start.
    """

    def __init__(self, fetch, on_result, interval=None, retries=None, backoff=None, timeout=None,
                 on_error=None):
        self.fetch = fetch
        self.on_result = on_result
        self.on_error = on_error
        self.interval = settings.ORDER_POLL_INTERVAL if interval is None else interval
        self.retries = retries
        self.backoff = backoff
        self.timeout = timeout
        self.scheduler = None

    @property
    def running(self):
        return self.scheduler is not None and self.scheduler.running

    def poll_once(self):
        try:
            result = call_with_retry(
                self.fetch, retries=self.retries, backoff=self.backoff, timeout=self.timeout
            )
        except FetchFailed as e:
            logger.error("Order poll failed: %s", e)
            if self.on_error:
                self.on_error(e)
            return None
        self.on_result(result)
        return result

    def start(self):
        if self.running:
            return self
        self.scheduler = BackgroundScheduler()
        self.scheduler.add_job(
            self.poll_once,
            trigger=IntervalTrigger(seconds=self.interval),
            id="order_poll",
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(),
        )
        self.scheduler.start()
        logger.info("Order poller started (every %ss)", self.interval)
        return self

    def stop(self, wait=True):
        if self.scheduler is None:
            return
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
        self.scheduler = None
        logger.info("Order poller stopped")

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False


class BoardSnapshot:
    """Statuses by order id from one poll, comparable with the next."""

    def __init__(self, orders=()):
        self.statuses = {str(order['id']): order['status'] for order in orders}

    def __len__(self):
        return len(self.statuses)

    def diff(self, previous):
        """
        Return ``(arrived, changed, gone)`` against an earlier snapshot.

        ``changed`` holds ``(order_id, old_status, new_status)`` tuples.
        """
        previous = previous or BoardSnapshot()
        arrived = [order_id for order_id in self.statuses if order_id not in previous.statuses]
        gone = [order_id for order_id in previous.statuses if order_id not in self.statuses]
        changed = [
            (order_id, previous.statuses[order_id], status)
            for order_id, status in self.statuses.items()
            if order_id in previous.statuses and previous.statuses[order_id] != status
        ]
        return arrived, changed, gone
