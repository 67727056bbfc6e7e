"""Tests for the chat-backed presence, description and comparison steps."""

from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest
import pytest_mock
from openai import OpenAIError

from facelogin.errors import PerceptionServiceError
from facelogin.imaging.payload import parse_image_payload
from facelogin.perception.client import PerceptionClient
from facelogin.perception.describer import DescriptorGenerator
from facelogin.perception.matcher import PairwiseMatcher, parse_similarity
from facelogin.perception.presence import PresenceVerifier, is_affirmative
from tests.fakes import image_data_url


def _completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def openai_mock(mocker: pytest_mock.MockerFixture):
    client_cls = mocker.patch("facelogin.perception.client.AsyncOpenAI")
    instance = client_cls.return_value
    instance.chat.completions.create = mocker.AsyncMock(return_value=_completion("yes"))
    return instance


@pytest.mark.asyncio
async def test_client_sends_image_part(openai_mock) -> None:
    client = PerceptionClient()

    answer = await client.complete("is there a face?", image_url="data:image/jpeg;base64,AAA")

    assert answer == "yes"
    kwargs = openai_mock.chat.completions.create.await_args.kwargs
    content = kwargs["messages"][-1]["content"]
    assert content[1] == {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,AAA"}}
    assert kwargs["model"] == "google/gemini-2.5-flash"


@pytest.mark.asyncio
async def test_client_wraps_transport_errors(openai_mock) -> None:
    openai_mock.chat.completions.create.side_effect = OpenAIError("gateway down")
    client = PerceptionClient()

    with pytest.raises(PerceptionServiceError):
        await client.complete("prompt")


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, "   "])
async def test_client_rejects_empty_answers(openai_mock, content) -> None:
    openai_mock.chat.completions.create.return_value = _completion(content)
    client = PerceptionClient()

    with pytest.raises(PerceptionServiceError):
        await client.complete("prompt")


def test_client_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    from facelogin.config.settings import get_settings

    monkeypatch.setenv("PERCEPTION_API_KEY", "")
    get_settings.cache_clear()

    with pytest.raises(RuntimeError):
        PerceptionClient()


@pytest.mark.parametrize(
    ("answer", "expected"),
    [
        ("Yes", True),
        ("yes.", True),
        ("نعم", True),
        ("No", False),
        ("I am not sure, maybe yes", False),
        ("yesterday", False),
    ],
)
def test_presence_answer_is_conservative(answer: str, expected: bool) -> None:
    assert is_affirmative(answer) is expected


@pytest.mark.asyncio
async def test_presence_verifier_uses_image(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.Mock()
    client.complete = mocker.AsyncMock(return_value="No, the image is too dark.")
    image = parse_image_payload(image_data_url())

    detected = await PresenceVerifier(client).detect_face(image)

    assert detected is False
    assert client.complete.await_args.kwargs["image_url"] == image.data_url


@pytest.mark.asyncio
async def test_descriptor_generator_returns_description(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.Mock()
    client.complete = mocker.AsyncMock(return_value="Oval face, wide-set brown eyes.")
    image = parse_image_payload(image_data_url())

    description = await DescriptorGenerator(client).describe(image)

    assert description == "Oval face, wide-set brown eyes."


@pytest.mark.asyncio
async def test_descriptor_generator_has_no_fallback(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.Mock()
    client.complete = mocker.AsyncMock(side_effect=PerceptionServiceError())
    image = parse_image_payload(image_data_url())

    with pytest.raises(PerceptionServiceError):
        await DescriptorGenerator(client).describe(image)


@pytest.mark.parametrize(
    ("answer", "expected"),
    [
        ("85", 85),
        ("Similarity: 72%", 72),
        ("150", 100),
        ("0", 0),
        ("no number here", None),
        ("", None),
    ],
)
def test_parse_similarity(answer: str, expected: int | None) -> None:
    assert parse_similarity(answer) == expected


@pytest.mark.asyncio
async def test_matcher_scores_malformed_answer_as_zero(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.Mock()
    client.complete = mocker.AsyncMock(return_value="They look alike.")

    score = await PairwiseMatcher(client).compare("submitted", "stored")

    assert score == 0


@pytest.mark.asyncio
async def test_matcher_degrades_transport_failure_to_zero(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.Mock()
    client.complete = mocker.AsyncMock(side_effect=PerceptionServiceError())

    score = await PairwiseMatcher(client).compare("submitted", "stored")

    assert score == 0


@pytest.mark.asyncio
async def test_matcher_prompt_contains_both_descriptors(mocker: pytest_mock.MockerFixture) -> None:
    client = mocker.Mock()
    client.complete = mocker.AsyncMock(return_value="91")

    score = await PairwiseMatcher(client).compare("round face, scar", "oval face, glasses")

    prompt = client.complete.await_args.args[0]
    assert score == 91
    assert "round face, scar" in prompt
    assert "oval face, glasses" in prompt


def _gateway(*payloads: dict) -> httpx.MockTransport:
    replies = iter(payloads)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=next(replies))

    return httpx.MockTransport(handler)


def _chat_reply(content: str) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "google/gemini-2.5-flash",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


@pytest.mark.asyncio
async def test_client_reads_gateway_answer() -> None:
    client = PerceptionClient(transport=_gateway(_chat_reply(" yes ")))
    try:
        answer = await client.complete("is there a face?")
    finally:
        await client.close()

    assert answer == "yes"


@pytest.mark.asyncio
async def test_client_rejects_choice_without_message() -> None:
    client = PerceptionClient(transport=_gateway({"choices": [{"index": 0}]}))
    try:
        with pytest.raises(PerceptionServiceError):
            await client.complete("prompt")
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_matcher_scores_choice_without_message_as_zero() -> None:
    client = PerceptionClient(transport=_gateway({"choices": [{"index": 0}]}))
    try:
        score = await PairwiseMatcher(client).compare("submitted", "stored")
    finally:
        await client.close()

    assert score == 0
