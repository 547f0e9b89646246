import asyncio

import httpx
import pytest


class FakeClient:
    """Stands in for CompletionClient; records prompts and replays a scripted outcome."""

    def __init__(self, text: str = "Improved text", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[dict] = []

    async def complete(self, **kwargs):
        from backend.app.services.ai_client import CompletionMeta

        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.text, CompletionMeta(model="gemini-test", latency_ms=1, status_code=200, retries=0)


@pytest.fixture()
def use_gateway(app):
    from backend.app.services.suggestions import SuggestionGateway, get_suggestion_gateway

    def _use(client_impl):
        gateway = SuggestionGateway(client_impl)
        app.dependency_overrides[get_suggestion_gateway] = lambda: gateway
        return gateway
    return _use


def _unreachable_client():
    from backend.app.services.ai_client import CompletionClient

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return CompletionClient(api_key="test-key", model="gemini-test", transport=httpx.MockTransport(handler))


def test_suggestions_return_provider_text(client, make_user, use_gateway):
    fake = FakeClient(text="Seasoned engineer who ships.")
    use_gateway(fake)
    _, headers = make_user("ai1@example.com")

    r = client.post(
        "/api/ai/suggestions",
        json={"section": "personalInfo", "currentContent": {"summary": "I code"}},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert r.json() == {"suggestions": "Seasoned engineer who ships.", "fromFallback": False}
    assert '"I code"' in fake.calls[0]["user_text"]


def test_unknown_section_fails_before_any_outbound_call(client, make_user, use_gateway):
    fake = FakeClient()
    use_gateway(fake)
    _, headers = make_user("ai2@example.com")

    r = client.post("/api/ai/suggestions", json={"section": "hobbies"}, headers=headers)
    assert r.status_code == 400, r.text
    assert r.json()["errors"][0]["field"] == "section"
    assert fake.calls == []


def test_unreachable_provider_falls_back(client, make_user, use_gateway):
    from backend.app.services.suggestions import FALLBACK_SUGGESTIONS

    use_gateway(_unreachable_client())
    _, headers = make_user("ai3@example.com")

    r = client.post(
        "/api/ai/suggestions",
        json={"section": "experience", "currentContent": {"experience": []}},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert r.json() == {"suggestions": FALLBACK_SUGGESTIONS["experience"], "fromFallback": True}


def test_unconfigured_provider_falls_back(client, make_user, use_gateway):
    from backend.app.services.suggestions import FALLBACK_SUGGESTIONS

    use_gateway(None)
    _, headers = make_user("ai4@example.com")

    r = client.post("/api/ai/suggestions", json={"section": "skills"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["fromFallback"] is True
    assert r.json()["suggestions"] == FALLBACK_SUGGESTIONS["skills"]


def test_optimize_degrades_on_timeout(client, make_user, use_gateway):
    from backend.app.services.ai_client import AIClientTimeout
    from backend.app.services.suggestions import FALLBACK_ATS

    use_gateway(FakeClient(error=AIClientTimeout("Gemini request timed out")))
    _, headers = make_user("ai5@example.com")

    r = client.post(
        "/api/ai/optimize",
        json={"resumeContent": {"title": "X"}, "jobDescription": "Python backend role"},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert r.json() == {"suggestions": FALLBACK_ATS, "fromFallback": True}


def test_optimize_requires_job_description(client, make_user, use_gateway):
    use_gateway(FakeClient())
    _, headers = make_user("ai6@example.com")
    r = client.post(
        "/api/ai/optimize",
        json={"resumeContent": {}, "jobDescription": "   "},
        headers=headers,
    )
    assert r.status_code == 400


def test_cover_letter_success(client, make_user, use_gateway):
    fake = FakeClient(text="Dear Acme team, ...")
    use_gateway(fake)
    _, headers = make_user("ai7@example.com")

    r = client.post(
        "/api/ai/cover-letter",
        json={"resumeContent": {"title": "X"}, "jobDescription": "Build APIs", "companyName": "Acme"},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert r.json() == {"coverLetter": "Dear Acme team, ..."}
    assert "Acme" in fake.calls[0]["user_text"]
    assert fake.calls[0]["max_output_tokens"] == 1000


def test_cover_letter_provider_failure_is_server_error(client, make_user, use_gateway):
    from backend.app.services.ai_client import AIClientHTTPError

    use_gateway(FakeClient(error=AIClientHTTPError(status_code=503, message="upstream overloaded")))
    _, headers = make_user("ai8@example.com")

    r = client.post(
        "/api/ai/cover-letter",
        json={"resumeContent": {}, "jobDescription": "Build APIs", "companyName": "Acme"},
        headers=headers,
    )
    assert r.status_code == 500
    assert "upstream overloaded" not in r.text
    assert r.json()["success"] is False


def test_ai_routes_require_auth(client, use_gateway):
    fake = FakeClient()
    use_gateway(fake)
    r = client.post("/api/ai/suggestions", json={"section": "skills"})
    assert r.status_code == 401
    assert fake.calls == []


def test_completion_client_parses_gemini_response():
    from backend.app.services.ai_client import CompletionClient

    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers["x-goog-api-key"]
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "  hello  "}]}}]})

    client = CompletionClient(api_key="k", model="models/gemini-test", transport=httpx.MockTransport(handler))
    text, meta = asyncio.run(client.complete(user_text="hi", system_text="sys"))

    assert text == "hello"
    assert meta.status_code == 200 and meta.retries == 0
    assert seen["url"].endswith("/v1/models/gemini-test:generateContent")
    assert seen["key"] == "k"


def test_completion_client_raises_http_error():
    from backend.app.services.ai_client import AIClientHTTPError, CompletionClient

    client = CompletionClient(
        api_key="k",
        model="gemini-test",
        transport=httpx.MockTransport(lambda request: httpx.Response(429, text="quota")),
    )
    with pytest.raises(AIClientHTTPError) as exc:
        asyncio.run(client.complete(user_text="hi"))
    assert exc.value.status_code == 429


def test_completion_client_maps_timeouts():
    from backend.app.services.ai_client import AIClientTimeout, CompletionClient

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    client = CompletionClient(api_key="k", model="gemini-test", transport=httpx.MockTransport(handler))
    with pytest.raises(AIClientTimeout):
        asyncio.run(client.complete(user_text="hi"))


def test_completion_client_does_not_retry_timeouts():
    from backend.app.services.ai_client import AIClientTimeout, CompletionClient

    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ReadTimeout("slow", request=request)

    client = CompletionClient(
        api_key="k",
        model="gemini-test",
        max_retries=2,
        transport=httpx.MockTransport(handler),
    )
    with pytest.raises(AIClientTimeout):
        asyncio.run(client.complete(user_text="hi"))
    assert len(calls) == 1


def test_gateway_builds_section_prompts():
    from backend.app.services.suggestions import SECTIONS, SuggestionGateway

    fake = FakeClient()
    gateway = SuggestionGateway(fake)
    content = {
        "summary": "S",
        "experience": [{"company": "Acme"}],
        "education": [{"institution": "State U"}],
        "skills": [{"category": "Lang"}],
        "projects": [{"name": "Proj"}],
    }
    for section in SECTIONS:
        result = asyncio.run(gateway.suggest(section, content))
        assert result.from_fallback is False

    prompts = [c["user_text"] for c in fake.calls]
    assert "professional summary" in prompts[0]
    assert "Acme" in prompts[1]
    assert "State U" in prompts[2]
    assert "Lang" in prompts[3]
    assert "Proj" in prompts[4]
