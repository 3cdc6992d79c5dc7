from types import SimpleNamespace

import pytest

from jobtracker.dependencies import get_job_parser
from jobtracker.errors import AIParsingError
from jobtracker.main import app
from jobtracker.schemas.job import ImageInput, PartialJobFields, SalaryFrequency
from jobtracker.services.parse_service import JobParser, OpenAIJobParser, parse_job_response


class StubParser(JobParser):
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def parse(self, text=None, image=None):
        self.calls.append((text, image))
        if self.error:
            raise self.error
        return self.result


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, content):
        self.chat = SimpleNamespace(completions=FakeCompletions(content))


class TestParseJobResponse:
    def test_plain_json(self):
        parsed = parse_job_response('{"title": "SRE", "company": "Initech", "tech_stack": ["Go", "Go", " k8s "]}')
        assert parsed.title == "SRE"
        assert parsed.company == "Initech"
        assert parsed.tech_stack == ["Go", "k8s"]

    def test_fenced_json(self):
        text = 'Here you go:\n```json\n{"title": "SRE", "company": "Initech"}\n```'
        assert parse_job_response(text).company == "Initech"

    def test_unlabelled_fence(self):
        text = '```\n{"title": "SRE", "company": "Initech", "salary_frequency": "hourly"}\n```'
        assert parse_job_response(text).salary_frequency is SalaryFrequency.HOURLY

    def test_unknown_frequency_defaults_to_yearly(self):
        parsed = parse_job_response('{"title": "SRE", "company": "Initech", "salary_frequency": "per sprint"}')
        assert parsed.salary_frequency is SalaryFrequency.YEARLY

    def test_empty_response(self):
        with pytest.raises(AIParsingError, match="empty response"):
            parse_job_response("   ")

    def test_invalid_json(self):
        with pytest.raises(AIParsingError, match="invalid JSON"):
            parse_job_response("title: SRE")

    def test_non_object_json(self):
        with pytest.raises(AIParsingError, match="invalid JSON"):
            parse_job_response('["SRE"]')

    def test_missing_required_fields(self):
        with pytest.raises(AIParsingError, match="company"):
            parse_job_response('{"title": "SRE"}')


class TestOpenAIJobParser:
    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        parser = OpenAIJobParser(api_key="")
        with pytest.raises(AIParsingError) as exc_info:
            await parser.parse(text="Senior SRE at Initech")
        assert exc_info.value.missing_credential

    @pytest.mark.asyncio
    async def test_no_input(self):
        parser = OpenAIJobParser(client=FakeOpenAI("{}"))
        with pytest.raises(AIParsingError, match="No input"):
            await parser.parse()

    @pytest.mark.asyncio
    async def test_text_request(self):
        fake = FakeOpenAI('{"title": "SRE", "company": "Initech", "work_model": "Remote"}')
        parser = OpenAIJobParser(model="test-model", client=fake)

        parsed = await parser.parse(text="Senior SRE at Initech, fully remote")

        assert parsed.work_model == "Remote"
        kwargs = fake.chat.completions.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["response_format"] == {"type": "json_object"}
        user_content = kwargs["messages"][1]["content"]
        assert "Senior SRE at Initech" in user_content[0]["text"]

    @pytest.mark.asyncio
    async def test_image_request(self):
        fake = FakeOpenAI('{"title": "SRE", "company": "Initech"}')
        parser = OpenAIJobParser(client=fake)

        await parser.parse(image=ImageInput(data=b"\x89PNG", mime_type="image/png"))

        user_content = fake.chat.completions.kwargs["messages"][1]["content"]
        assert user_content[0]["image_url"]["url"].startswith("data:image/png;base64,")
        assert "SCREENSHOT" in user_content[1]["text"]


class TestParseEndpoint:
    def _use_parser(self, parser):
        app.dependency_overrides[get_job_parser] = lambda: parser

    def test_parse_text(self, client):
        stub = StubParser(result=PartialJobFields(title="SRE", company="Initech", tech_stack=["Go"]))
        self._use_parser(stub)

        r = client.post("/api/parse", data={"text": "Senior SRE at Initech"})
        assert r.status_code == 200
        assert r.json()["title"] == "SRE"
        assert r.json()["tech_stack"] == ["Go"]
        assert stub.calls[0][0] == "Senior SRE at Initech"

    def test_parse_image(self, client):
        stub = StubParser(result=PartialJobFields(title="SRE", company="Initech"))
        self._use_parser(stub)

        r = client.post("/api/parse", files={"image": ("shot.png", b"\x89PNG", "image/png")})
        assert r.status_code == 200
        image = stub.calls[0][1]
        assert image.data == b"\x89PNG"
        assert image.mime_type == "image/png"

    def test_parse_without_input(self, client):
        self._use_parser(StubParser())
        r = client.post("/api/parse", data={"text": "  "})
        assert r.status_code == 400
        assert r.json() == {"error": "No input provided for parsing"}

    def test_parse_failure(self, client):
        self._use_parser(StubParser(error=AIParsingError("AI returned invalid JSON format")))
        r = client.post("/api/parse", data={"text": "posting"})
        assert r.status_code == 502
        assert r.json() == {"error": "AI returned invalid JSON format"}

    def test_missing_credential(self, client):
        self._use_parser(StubParser(error=AIParsingError("AI API key is missing", missing_credential=True)))
        r = client.post("/api/parse", data={"text": "posting"})
        assert r.status_code == 503
