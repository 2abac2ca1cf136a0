"""
Endpoint tests for the Chevereto integration.

Requests go through the full FastAPI stack (auth, validation, exception
handlers, middleware); outbound traffic hits the in-memory Chevereto stub.
"""
import pytest

from tests.lib import ApiUser, DiarumApiClient, StubChevereto, make_api_user


def test_settings_default_to_disabled(api_client: DiarumApiClient, api_user: ApiUser):
    assert api_client.get_settings(api_user.access_token) == {
        "enabled": False,
        "domain": "",
        "api_key": "",
        "album_id": "",
    }


def test_full_flow(api_client: DiarumApiClient, api_user: ApiUser, stub_chevereto: StubChevereto):
    """Save, read back, test the connection, then upload."""
    token = api_user.access_token

    saved = api_client.save_settings(token, enabled=True, domain="http://host/", api_key="K")
    assert saved.status_code == 200
    assert saved.json() == {"success": True}

    current = api_client.get_settings(token)
    assert current["enabled"] is True
    assert current["domain"] == "http://host"
    assert current["api_key"] == "K"

    probe = api_client.check_connection(token, "http://host", "K")
    assert probe.status_code == 200
    assert probe.json() == {"success": True, "message": "Connection successful"}
    assert stub_chevereto.last_request.method == "GET"

    stub_chevereto.on("POST", 200, json={"image": {"url": "http://host/i/x.png"}})
    uploaded = api_client.upload(token, filename="photo.png", content=b"0123456789")

    assert uploaded.status_code == 200
    assert uploaded.json() == {"url": "http://host/i/x.png"}
    request = stub_chevereto.last_request
    assert request.headers["X-API-Key"] == "K"
    assert b"0123456789" in request.content
    assert b'filename="photo.png"' in request.content


@pytest.mark.parametrize(
    "method, path",
    [("GET", "/settings"), ("PUT", "/settings"), ("POST", "/test"), ("POST", "/upload")],
)
def test_endpoints_require_authentication(api_client: DiarumApiClient, method, path):
    response = api_client.request(method, path, json={})
    assert response.status_code == 401


def test_invalid_token_is_rejected(api_client: DiarumApiClient):
    response = api_client.request("GET", "/settings", token="not-a-jwt")
    assert response.status_code == 401


def test_enabling_without_credentials_is_rejected(api_client: DiarumApiClient, api_user: ApiUser):
    response = api_client.save_settings(api_user.access_token, enabled=True, domain="http://host")

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "ValidationError"
    assert body["message"] == "Domain and API Key are required to enable Chevereto"
    assert api_client.get_settings(api_user.access_token)["enabled"] is False


def test_malformed_body_is_bad_request(api_client: DiarumApiClient, api_user: ApiUser):
    response = api_client.request(
        "PUT", "/settings", token=api_user.access_token, json={"enabled": "definitely"}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request body"


def test_settings_are_isolated_between_users(api_client: DiarumApiClient, api_user: ApiUser):
    other = make_api_user()
    api_client.save_settings(api_user.access_token, enabled=True, domain="http://host", api_key="K")

    assert api_client.get_settings(other.access_token)["enabled"] is False


def test_connection_test_requires_domain_and_key(
    api_client: DiarumApiClient, api_user: ApiUser, stub_chevereto: StubChevereto
):
    response = api_client.check_connection(api_user.access_token, "", "K")

    assert response.status_code == 400
    assert response.json()["message"] == "Domain and API Key are required"
    assert stub_chevereto.call_count == 0


@pytest.mark.parametrize(
    "status_code, success, message",
    [
        (405, True, "Connection successful"),
        (404, False, "Chevereto API endpoint not found. Please check the domain."),
        (401, False, "Authentication failed. Please check your API key."),
    ],
)
def test_connection_test_outcomes_are_200(
    api_client: DiarumApiClient, api_user: ApiUser, stub_chevereto: StubChevereto,
    status_code, success, message,
):
    stub_chevereto.on("GET", status_code)

    response = api_client.check_connection(api_user.access_token, "http://host", "K")

    assert response.status_code == 200
    assert response.json() == {"success": success, "message": message}


def test_connection_failure_is_reported(
    api_client: DiarumApiClient, api_user: ApiUser, stub_chevereto: StubChevereto
):
    stub_chevereto.fail("GET")

    response = api_client.check_connection(api_user.access_token, "http://host", "K")

    assert response.status_code == 200
    assert response.json() == {"success": False, "message": "Connection failed: could not connect to server"}


def test_upload_while_disabled(api_client: DiarumApiClient, api_user: ApiUser, stub_chevereto: StubChevereto):
    response = api_client.upload(api_user.access_token)

    assert response.status_code == 400
    assert "not enabled" in response.json()["message"]
    assert stub_chevereto.call_count == 0


def test_upload_without_file(api_client: DiarumApiClient, api_user: ApiUser, stub_chevereto: StubChevereto):
    api_client.save_settings(api_user.access_token, enabled=True, domain="http://host", api_key="K")

    response = api_client.upload(api_user.access_token, field="not_source")

    assert response.status_code == 400
    assert response.json()["message"] == "No file provided"
    assert stub_chevereto.call_count == 0


def test_upload_rejected_by_chevereto(
    api_client: DiarumApiClient, api_user: ApiUser, stub_chevereto: StubChevereto
):
    api_client.save_settings(api_user.access_token, enabled=True, domain="http://host", api_key="K")
    stub_chevereto.on("POST", 400, json={"status_code": 400, "error": {"message": "invalid file"}})

    response = api_client.upload(api_user.access_token)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "IntegrationUploadError"
    assert body["message"] == "Chevereto error: invalid file"


def test_responses_carry_request_id(api_client: DiarumApiClient, api_user: ApiUser):
    response = api_client.request("GET", "/settings", token=api_user.access_token)

    assert response.status_code == 200
    assert response.headers["x-request-id"]


def test_connection_test_with_non_ascii_api_key(
    api_client: DiarumApiClient, api_user: ApiUser, stub_chevereto: StubChevereto
):
    response = api_client.check_connection(api_user.access_token, "http://host", "kéy")

    assert response.status_code == 200
    assert response.json() == {"success": False, "message": "Connection failed: invalid API key"}
    assert stub_chevereto.call_count == 0


def test_upload_with_non_ascii_api_key(
    api_client: DiarumApiClient, api_user: ApiUser, stub_chevereto: StubChevereto
):
    api_client.save_settings(api_user.access_token, enabled=True, domain="http://host", api_key="kéy")

    response = api_client.upload(api_user.access_token)

    assert response.status_code == 400
    assert response.json()["message"] == "Upload to Chevereto failed: invalid API key"
    assert stub_chevereto.call_count == 0
