# meydan/api/captions/test_caption_proxy.py
URL = '/functions/generate-caption'


def test_preflight_returns_ok_with_cors(client):
    response = client.options(URL)

    assert response.status_code == 200
    assert response.get_data(as_text=True) == 'ok'
    assert response.headers['Access-Control-Allow-Origin'] == '*'
    assert 'content-type' in response.headers['Access-Control-Allow-Headers']


def test_text_caption(client, openai_client):
    response = client.post(URL, json={"type": "text", "prompt": "beach trip"})

    assert response.status_code == 200
    assert response.get_json() == {"caption": "Sunset vibes #travel #sunset"}
    assert response.headers['Access-Control-Allow-Origin'] == '*'
    messages = openai_client.chat.completions.create.call_args.kwargs['messages']
    assert 'beach trip' in messages[0]['content']


def test_image_caption_sends_data_url(client, openai_client):
    response = client.post(URL, json={
        "type": "image",
        "prompt": "my dog",
        "image": {"data": "aGVsbG8=", "mimeType": "image/png"},
    })

    assert response.status_code == 200
    parts = openai_client.chat.completions.create.call_args.kwargs['messages'][0]['content']
    assert 'my dog' in parts[0]['text']
    assert parts[1]['image_url']['url'] == "data:image/png;base64,aGVsbG8="


def test_image_request_without_image_is_rejected(client, openai_client):
    response = client.post(URL, json={"type": "image"})

    assert response.status_code == 400
    assert 'error' in response.get_json()
    assert response.headers['Access-Control-Allow-Origin'] == '*'
    openai_client.chat.completions.create.assert_not_called()


def test_unknown_type_is_rejected(client):
    response = client.post(URL, json={"type": "audio", "prompt": "x"})
    assert response.status_code == 400


def test_generation_failure_returns_error(client, openai_client):
    openai_client.chat.completions.create.side_effect = RuntimeError("quota exceeded")

    response = client.post(URL, json={"type": "text", "prompt": "beach"})

    assert response.status_code == 500
    assert response.get_json() == {"error": "quota exceeded"}


def test_missing_api_key_returns_error(client, app):
    app.services['openai'].client = None

    response = client.post(URL, json={"type": "text", "prompt": "beach"})

    assert response.status_code == 500
    assert "OPENAI_API_KEY" in response.get_json()['error']
