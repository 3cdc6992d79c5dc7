from jobtracker.models.job import Job

__all__ = ["Job"]
