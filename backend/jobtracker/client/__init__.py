from jobtracker.client.api import JobTrackerAPI
from jobtracker.client.cache import JobCache
from jobtracker.client.forms import JobDraft
from jobtracker.client.mutations import MutationController
from jobtracker.client.tracker import TrackerClient

__all__ = ["JobTrackerAPI", "JobCache", "JobDraft", "MutationController", "TrackerClient"]
