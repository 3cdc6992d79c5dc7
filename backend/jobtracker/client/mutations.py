"""Optimistic create/update/delete over the job cache.

Every mutation follows the same protocol:

1. capture the current snapshot,
2. write the predicted snapshot to the cache before any I/O,
3. await the store,
4. on success write the reconciled snapshot; on failure write the captured
   snapshot back (minus placeholders of creates that have settled since),
   notify, and re-raise. Either way the cache is then invalidated so a
   background refetch picks up the store's state.

Steps 1 and 2 run synchronously inside ``create``/``update``/``delete``; the
returned task runs steps 3 and 4. Only one mutation per job id may be in
flight. Mutations on different ids may overlap, and whichever cache write
lands last wins; the invalidation after every settle repairs the snapshot
from the store.
"""
import asyncio
import itertools
import logging
from typing import Callable

from jobtracker.client.cache import JobCache, Snapshot
from jobtracker.client.api import JobTrackerAPI
from jobtracker.errors import MutationInFlightError, ServerError
from jobtracker.schemas.job import Job, JobFields, JobStatus

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]


def _log_notification(message: str):
    logger.error(message)


class MutationController:
    def __init__(self, api: JobTrackerAPI, cache: JobCache, notify: Notifier | None = None):
        self.api = api
        self.cache = cache
        self.notify = notify or _log_notification
        self._in_flight: set[int] = set()
        self._temp_ids = itertools.count(-1, -1)

    @property
    def in_flight(self) -> frozenset[int]:
        """Ids with a mutation awaiting the store (temporary ids for creates)."""
        return frozenset(self._in_flight)

    def is_busy(self, job_id: int) -> bool:
        return job_id in self._in_flight

    # -- create -------------------------------------------------------------

    def create(self, fields: JobFields) -> "asyncio.Task[Job]":
        loop = asyncio.get_running_loop()
        temp_id = next(self._temp_ids)
        self._begin(temp_id)

        previous = self.cache.read()
        placeholder = Job.model_validate({**fields.model_dump(), "id": temp_id, "status": JobStatus.PENDING})
        self._apply(previous + (placeholder,))
        return loop.create_task(self._settle_create(fields, placeholder, previous))

    async def _settle_create(self, fields: JobFields, placeholder: Job, previous: Snapshot) -> Job:
        try:
            job_id = await self.api.create_job(fields)
            confirmed = Job.model_validate({**fields.model_dump(), "id": job_id})
            self._reconcile(placeholder.id, confirmed, append_missing=True)
        except asyncio.CancelledError:
            self._restore(previous)
            raise
        except Exception as exc:
            self._rollback("create", placeholder.id, previous, exc)
            raise
        finally:
            self._in_flight.discard(placeholder.id)

        self.cache.invalidate()
        return confirmed

    # -- update -------------------------------------------------------------

    def update(self, job_id: int, fields: JobFields) -> "asyncio.Task[Job]":
        loop = asyncio.get_running_loop()
        self._begin(job_id)

        previous = self.cache.read()
        current = next((j for j in previous if j.id == job_id), None)
        predicted = Job.model_validate({
            **fields.model_dump(),
            "id": job_id,
            "created_at": current.created_at if current else None,
            "updated_at": current.updated_at if current else None,
        })
        self._apply(tuple(predicted if j.id == job_id else j for j in previous))
        return loop.create_task(self._settle_update(predicted, fields, previous))

    async def _settle_update(self, predicted: Job, fields: JobFields, previous: Snapshot) -> Job:
        try:
            await self.api.update_job(predicted.id, fields)
            self._reconcile(predicted.id, predicted, append_missing=False)
        except asyncio.CancelledError:
            self._restore(previous)
            raise
        except Exception as exc:
            self._rollback("update", predicted.id, previous, exc)
            raise
        finally:
            self._in_flight.discard(predicted.id)

        self.cache.invalidate()
        return predicted

    # -- delete -------------------------------------------------------------

    def delete(self, job_id: int) -> "asyncio.Task[None]":
        loop = asyncio.get_running_loop()
        self._begin(job_id)

        previous = self.cache.read()
        self._apply(tuple(j for j in previous if j.id != job_id))
        return loop.create_task(self._settle_delete(job_id, previous))

    async def _settle_delete(self, job_id: int, previous: Snapshot):
        try:
            try:
                await self.api.delete_job(job_id)
            except ServerError as exc:
                if exc.status_code != 404:
                    raise
                logger.info("Job %d was already gone; treating delete as done", job_id)
            current = self.cache.read()
            if any(j.id == job_id for j in current):
                self.cache.write(tuple(j for j in current if j.id != job_id))
        except asyncio.CancelledError:
            self._restore(previous)
            raise
        except Exception as exc:
            self._rollback("delete", job_id, previous, exc)
            raise
        finally:
            self._in_flight.discard(job_id)

        self.cache.invalidate()

    # -- shared -------------------------------------------------------------

    def _begin(self, job_id: int):
        if job_id in self._in_flight:
            raise MutationInFlightError(job_id)
        self._in_flight.add(job_id)

    def _apply(self, predicted: Snapshot):
        # A fetch that started before this write would otherwise land on top of it
        self.cache.cancel_fetches()
        self.cache.write(predicted)

    def _reconcile(self, target_id: int, confirmed: Job, append_missing: bool):
        current = self.cache.read()
        if any(j.id == target_id for j in current):
            snapshot = tuple(confirmed if j.id == target_id else j for j in current)
        elif any(j.id == confirmed.id for j in current):
            snapshot = tuple(confirmed if j.id == confirmed.id else j for j in current)
        elif append_missing:
            snapshot = current + (confirmed,)
        else:
            return
        self.cache.write(snapshot)

    def _rollback(self, operation: str, job_id: int, previous: Snapshot, exc: Exception):
        logger.warning("Rolling back %s of job %d: %s", operation, job_id, exc)
        self._restore(previous)
        self.notify(f"Failed to {operation} application: {exc}")

    def _restore(self, previous: Snapshot):
        # Placeholders of creates that settled since `previous` was captured must not come back
        self.cache.write(tuple(j for j in previous if not j.is_placeholder or j.id in self._in_flight))
        self.cache.invalidate()
