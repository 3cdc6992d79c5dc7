"""Read-side projections of a job snapshot: dashboard statistics and the grouped list.

All functions are pure; they never touch the cache.
"""
from collections import Counter
from datetime import date, timedelta
from typing import Iterable

from pydantic import BaseModel

from jobtracker.schemas.job import Job, JobStatus

STALE_AFTER_DAYS = 14
STALE_LIMIT = 5
TOP_TECH_LIMIT = 8

EARLY_STATUSES = {JobStatus.SAVED, JobStatus.APPLIED}
INTERVIEW_STATUSES = {JobStatus.INTERVIEW, JobStatus.TECHNICAL_TEST}

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

ALL = "All"


class DayCount(BaseModel):
    day: date
    label: str
    count: int


class TagCount(BaseModel):
    name: str
    count: int


class FunnelStage(BaseModel):
    name: str
    value: int


class StaleApplication(BaseModel):
    job: Job
    days_since_applied: int


class DashboardStats(BaseModel):
    total: int
    interviews: int
    offers: int
    rejected: int
    conversion_rate: float
    funnel: list[FunnelStage]
    last_7_days: list[DayCount]
    this_week_count: int
    last_week_count: int
    week_growth: int
    stale_applications: list[StaleApplication]
    top_tech: list[TagCount]


class MonthGroup(BaseModel):
    month: str
    jobs: list[Job]


class YearGroup(BaseModel):
    year: int
    months: list[MonthGroup]


def week_start(day: date) -> date:
    """The Sunday that opens the week containing ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def stale_applications(jobs: Iterable[Job], today: date | None = None) -> list[StaleApplication]:
    """Early-pipeline jobs untouched for more than two weeks, oldest first."""
    today = today or date.today()
    stale = [
        StaleApplication(job=job, days_since_applied=(today - job.date_applied).days)
        for job in jobs
        if job.status in EARLY_STATUSES and (today - job.date_applied).days > STALE_AFTER_DAYS
    ]
    stale.sort(key=lambda s: s.days_since_applied, reverse=True)
    return stale[:STALE_LIMIT]


def top_tech(jobs: Iterable[Job], limit: int = TOP_TECH_LIMIT) -> list[TagCount]:
    counts = Counter(tag for job in jobs for tag in job.tech_stack)
    # most_common keeps first-seen order among equal counts
    return [TagCount(name=name, count=count) for name, count in counts.most_common(limit)]


def compute_stats(jobs: Iterable[Job], today: date | None = None) -> DashboardStats:
    jobs = list(jobs)
    today = today or date.today()

    total = len(jobs)
    interviews = sum(1 for j in jobs if j.status in INTERVIEW_STATUSES)
    offers = sum(1 for j in jobs if j.status is JobStatus.OFFER)
    rejected = sum(1 for j in jobs if j.status is JobStatus.REJECTED)
    conversion_rate = round(interviews / total * 100, 1) if total else 0.0

    per_day = Counter(j.date_applied for j in jobs)
    last_7_days = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        last_7_days.append(DayCount(day=day, label=WEEKDAYS[day.weekday()], count=per_day[day]))

    this_week_start = week_start(today)
    last_week_start = this_week_start - timedelta(days=7)
    last_week_end = this_week_start - timedelta(days=1)
    this_week_count = sum(1 for j in jobs if j.date_applied >= this_week_start)
    last_week_count = sum(1 for j in jobs if last_week_start <= j.date_applied <= last_week_end)

    return DashboardStats(
        total=total,
        interviews=interviews,
        offers=offers,
        rejected=rejected,
        conversion_rate=conversion_rate,
        funnel=[
            FunnelStage(name="Applied", value=total),
            FunnelStage(name="Interview", value=interviews),
            FunnelStage(name="Offer", value=offers),
        ],
        last_7_days=last_7_days,
        this_week_count=this_week_count,
        last_week_count=last_week_count,
        week_growth=this_week_count - last_week_count,
        stale_applications=stale_applications(jobs, today),
        top_tech=top_tech(jobs),
    )


def _is_unset(value) -> bool:
    return value is None or value == "" or value == ALL


def filter_jobs(
    jobs: Iterable[Job],
    search: str = "",
    status: JobStatus | str | None = None,
    year: int | str | None = None,
    month: str | None = None,
) -> list[Job]:
    """Narrow a snapshot by free text over title/company, status, year and month name."""
    needle = (search or "").strip().lower()
    result = []
    for job in jobs:
        if needle and needle not in job.title.lower() and needle not in job.company.lower():
            continue
        if not _is_unset(status) and job.status != JobStatus(status):
            continue
        if not _is_unset(year) and job.date_applied.year != int(year):
            continue
        if not _is_unset(month) and MONTHS[job.date_applied.month - 1] != month:
            continue
        result.append(job)
    return result


def group_jobs(jobs: Iterable[Job]) -> list[YearGroup]:
    """Group by year then month, newest first at every level."""
    by_year: dict[int, dict[int, list[Job]]] = {}
    for job in jobs:
        by_year.setdefault(job.date_applied.year, {}).setdefault(job.date_applied.month, []).append(job)

    groups = []
    for year in sorted(by_year, reverse=True):
        months = [
            MonthGroup(
                month=MONTHS[month - 1],
                jobs=sorted(by_year[year][month], key=lambda j: j.date_applied, reverse=True),
            )
            for month in sorted(by_year[year], reverse=True)
        ]
        groups.append(YearGroup(year=year, months=months))
    return groups


def available_years(jobs: Iterable[Job]) -> list[int]:
    return sorted({job.date_applied.year for job in jobs}, reverse=True)
