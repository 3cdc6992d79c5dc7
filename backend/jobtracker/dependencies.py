from jobtracker.services.parse_service import JobParser, OpenAIJobParser


async def get_job_parser() -> JobParser:
    return OpenAIJobParser()
