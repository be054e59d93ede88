# meydan/services/test_caption_client.py
import base64
from unittest.mock import MagicMock

import pytest
import requests

from meydan.services.caption_client import (
    CaptionClient, IMAGE_FALLBACK_CAPTION, TEXT_FALLBACK_CAPTION
)

ENDPOINT = "https://captions.example/functions/generate-caption"


def make_response(status_code=200, body=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def caption_client(session):
    return CaptionClient(endpoint_url=ENDPOINT, session=session)


def test_text_caption_is_trimmed(caption_client, session):
    session.post.return_value = make_response(body={"caption": "  Sunset vibes #travel  "})

    assert caption_client.generate_from_text("beach trip") == "Sunset vibes #travel"
    session.post.assert_called_once_with(ENDPOINT, json={"type": "text", "prompt": "beach trip"})


def test_image_payload_is_base64(caption_client, session):
    session.post.return_value = make_response(body={"caption": "Cute dog #dog"})

    assert caption_client.generate_from_image(b"\x89PNG", "image/png", "my dog") == "Cute dog #dog"
    payload = session.post.call_args.kwargs['json']
    assert payload['type'] == 'image'
    assert payload['prompt'] == 'my dog'
    assert payload['image'] == {"data": base64.b64encode(b"\x89PNG").decode('ascii'), "mimeType": "image/png"}


@pytest.mark.parametrize("response", [
    make_response(status_code=500, body={"error": "OPENAI_API_KEY environment variable not set"}),
    make_response(body={"error": "quota exceeded"}),
    make_response(body={"caption": "   "}),
    make_response(body={"something": "else"}),
    make_response(body=["not", "a", "dict"]),
    make_response(status_code=502, json_error=ValueError("not json")),
])
def test_failures_return_fallback(caption_client, session, response):
    session.post.return_value = response
    assert caption_client.generate_from_text("beach") == TEXT_FALLBACK_CAPTION
    assert caption_client.generate_from_image(b"img", "image/jpeg") == IMAGE_FALLBACK_CAPTION


def test_network_error_returns_fallback(caption_client, session):
    session.post.side_effect = requests.ConnectionError("refused")
    assert caption_client.generate_from_text("beach") == TEXT_FALLBACK_CAPTION


def test_missing_endpoint_returns_fallback(session):
    client = CaptionClient(endpoint_url=None, session=session)
    assert client.generate_from_text("beach") == TEXT_FALLBACK_CAPTION
    session.post.assert_not_called()


def test_init_app_reads_proxy_url(app):
    client = CaptionClient()
    client.init_app(app)
    assert client.endpoint_url == app.config['CAPTION_PROXY_URL']
