import logging
from datetime import date

from jobtracker.client.api import JobTrackerAPI
from jobtracker.client.cache import JobCache
from jobtracker.client.mutations import MutationController, Notifier
from jobtracker.client.views import DashboardStats, YearGroup, compute_stats, filter_jobs, group_jobs
from jobtracker.schemas.job import Attachment, JobStatus

logger = logging.getLogger(__name__)


class TrackerClient:
    """One client session: API, cache and mutation controller wired together.

    Construct one per application run and close it on shutdown::

        async with TrackerClient() as tracker:
            await tracker.refresh()
            await tracker.mutations.delete(3)
    """

    def __init__(self, api: JobTrackerAPI | None = None, notify: Notifier | None = None):
        self.api = api or JobTrackerAPI()
        self.cache = JobCache(fetch=self.api.list_jobs)
        self.mutations = MutationController(self.api, self.cache, notify=notify)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self.cache.aclose()
        await self.api.aclose()
        logger.debug("Tracker client closed")

    async def refresh(self):
        await self.cache.refetch()

    def dashboard(self, today: date | None = None) -> DashboardStats:
        return compute_stats(self.cache.read(), today)

    def listing(
        self,
        search: str = "",
        status: JobStatus | str | None = None,
        year: int | str | None = None,
        month: str | None = None,
    ) -> list[YearGroup]:
        return group_jobs(filter_jobs(self.cache.read(), search, status, year, month))

    async def upload_attachment(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> Attachment:
        url = await self.api.upload_file(filename, content, content_type)
        return Attachment(name=filename, url=url)

    async def export(self, format: str = "json") -> bytes:
        return await self.api.export_jobs(format)
