"""Error taxonomy shared by the API client, the mutation controller and the AI parser."""


class JobTrackerError(Exception):
    """Base class for every failure surfaced to a caller."""


class ValidationError(JobTrackerError):
    """Required fields are missing; raised before any request is made."""

    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(f"Please fill in all required fields: {', '.join(fields)}")


class NetworkError(JobTrackerError):
    """The request never produced an HTTP response."""


class ServerError(JobTrackerError):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class AIParsingError(JobTrackerError):
    def __init__(self, message: str, missing_credential: bool = False):
        self.missing_credential = missing_credential
        super().__init__(message)


class MutationInFlightError(JobTrackerError):
    """Another mutation for the same job has not settled yet."""

    def __init__(self, job_id: int):
        self.job_id = job_id
        super().__init__(f"Job {job_id} is already being saved")
