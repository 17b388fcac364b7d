"""Tests for API endpoints."""

from fastapi import status

from api.config import Settings
from api.dependencies import get_settings_dependency
from api.main import app
from fdx.secure_xml import parse_xml_safe

TREATMENT = "A man walks into a bar and orders a drink."


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client):
        """Test health check endpoint."""
        response = client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert data["version"] == "0.1.0"

    def test_readiness_check_ready(self, client, monkeypatch, provider_factory):
        """Ready when the provider answers its health check."""
        monkeypatch.setattr(
            "api.routers.health.get_llm_provider", lambda settings: provider_factory(healthy=True)
        )
        response = client.get("/ready")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "ready"
        assert data["services"] == {"llm": True}

    def test_readiness_check_unreachable(self, client, monkeypatch, provider_factory):
        """Not ready when the provider is down."""
        monkeypatch.setattr(
            "api.routers.health.get_llm_provider", lambda settings: provider_factory(healthy=False)
        )
        response = client.get("/ready")
        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["status"] == "not_ready"

    def test_readiness_check_unconfigured(self, client, monkeypatch):
        """Not ready when the provider cannot be built."""

        def _unconfigured(settings):
            raise ValueError("openai API key is required")

        monkeypatch.setattr("api.routers.health.get_llm_provider", _unconfigured)
        response = client.get("/ready")
        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["services"] == {"llm": False}

    def test_root(self, client):
        """Service banner points at the conversion endpoint."""
        data = client.get("/").json()
        assert data["convert"] == "/v1/convert"


class TestConvertJSON:
    """Tests for POST /v1/convert with a JSON body."""

    def test_convert_success(self, client, fake_provider):
        response = client.post(
            "/v1/convert",
            json={"treatment": TREATMENT, "title": "Bar Scene", "author": "J. Doe"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["success"] is True
        assert data["title"] == "Bar Scene"
        assert data["author"] == "J. Doe"
        assert data["scene_count"] == 1
        assert data["element_count"] == 3
        assert data["filename"].endswith(".fdx")
        assert data["download_url"] == f"/v1/files/{data['filename']}"
        assert fake_provider.calls[0]["json_mode"] is True

    def test_download_generated_file(self, client):
        data = client.post(
            "/v1/convert",
            json={"treatment": TREATMENT, "title": "Bar Scene", "author": "J. Doe"},
        ).json()

        response = client.get(data["download_url"])

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("application/xml")
        assert data["filename"] in response.headers["content-disposition"]
        root = parse_xml_safe(response.content)
        assert [p.findtext("Text") for p in root.findall("Content/Paragraph")] == [
            "INT. BAR - NIGHT",
            "A man enters.",
            "MAN",
            "Whiskey, neat.",
        ]

    def test_defaults_for_missing_title_and_author(self, client):
        data = client.post("/v1/convert", json={"treatment": TREATMENT}).json()
        assert data["title"] == "Untitled Screenplay"
        assert data["author"] == "Anonymous"

    def test_missing_treatment(self, client):
        response = client.post("/v1/convert", json={"title": "Bar Scene"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        data = response.json()
        assert data["success"] is False
        assert data["details"][0]["field"] == "treatment"

    def test_invalid_json_body(self, client):
        response = client.post(
            "/v1/convert",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "ValidationException"

    def test_json_array_body(self, client):
        response = client.post("/v1/convert", json=[TREATMENT])
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_blank_treatment(self, client, fake_provider):
        response = client.post("/v1/convert", json={"treatment": "   "})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert fake_provider.calls == []


class TestConvertForm:
    """Tests for POST /v1/convert with form data."""

    def test_file_upload(self, client, fake_provider):
        response = client.post(
            "/v1/convert",
            files={"file": ("bar.txt", TREATMENT.encode("utf-8"), "text/plain")},
            data={"title": "Bar Scene", "author": "J. Doe"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["title"] == "Bar Scene"
        assert TREATMENT in fake_provider.calls[0]["prompt"]

    def test_file_wins_over_text_field(self, client, fake_provider):
        response = client.post(
            "/v1/convert",
            files={"file": ("bar.md", b"From the file.", "text/markdown")},
            data={"treatment": "From the field."},
        )

        assert response.status_code == status.HTTP_200_OK
        prompt = fake_provider.calls[0]["prompt"]
        assert "From the file." in prompt
        assert "From the field." not in prompt

    def test_text_field(self, client, fake_provider):
        response = client.post("/v1/convert", data={"treatment": TREATMENT})
        assert response.status_code == status.HTTP_200_OK
        assert TREATMENT in fake_provider.calls[0]["prompt"]

    def test_unsupported_suffix(self, client):
        response = client.post(
            "/v1/convert",
            files={"file": ("bar.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "Unsupported file type" in response.json()["message"]

    def test_non_utf8_upload(self, client):
        response = client.post(
            "/v1/convert",
            files={"file": ("bar.txt", b"\xff\xfe\xfa", "text/plain")},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_empty_upload(self, client):
        response = client.post(
            "/v1/convert",
            files={"file": ("bar.txt", b"", "text/plain")},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_long_title_same_in_prompt_and_document(self, client, fake_provider, file_store):
        long_title = "The Night " * 30
        response = client.post(
            "/v1/convert",
            files={"file": ("bar.txt", TREATMENT.encode("utf-8"), "text/plain")},
            data={"title": long_title, "author": "J. Doe"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        title = data["title"]
        assert len(title) <= 200
        assert long_title.startswith(title)
        assert f"Title: {title}\n" in fake_provider.calls[0]["prompt"]
        root = parse_xml_safe(file_store.path_for(data["filename"]).read_bytes())
        assert root.findtext("TitlePage/Content/Paragraph/Text") == title

    def test_oversized_upload_rejected(self, make_client, fake_provider):
        client = make_client(fake_provider)
        app.dependency_overrides[get_settings_dependency] = lambda: Settings(max_upload_bytes=1000)

        response = client.post(
            "/v1/convert",
            files={"file": ("bar.txt", b"x" * 200_000, "text/plain")},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "exceeds maximum size" in response.json()["message"]
        assert fake_provider.calls == []

    def test_oversized_text_part_rejected(self, make_client, fake_provider):
        client = make_client(fake_provider)
        app.dependency_overrides[get_settings_dependency] = lambda: Settings(max_upload_bytes=1000)

        response = client.post(
            "/v1/convert",
            files={"treatment": (None, "x" * 5000)},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "ValidationException"
        assert fake_provider.calls == []

    def test_missing_treatment(self, client):
        response = client.post("/v1/convert", data={"title": "Bar Scene"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Provide a treatment as text or upload a file"


class TestConvertFailures:
    """Tests for conversion errors surfacing through the API."""

    def test_provider_unreachable(self, make_client, failing_provider, file_store):
        response = make_client(failing_provider).post("/v1/convert", json={"treatment": TREATMENT})

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "StructuringError"
        assert not file_store.root.exists() or list(file_store.root.iterdir()) == []

    def test_invalid_reply(self, make_client, provider_factory):
        response = make_client(provider_factory(reply="not json")).post(
            "/v1/convert", json={"treatment": TREATMENT}
        )
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert "invalid JSON" in response.json()["message"]

    def test_request_id_echoed(self, make_client, failing_provider):
        response = make_client(failing_provider).post(
            "/v1/convert",
            json={"treatment": TREATMENT},
            headers={"X-Request-ID": "req-42"},
        )
        assert response.json()["request_id"] == "req-42"


class TestDownload:
    """Tests for GET /v1/files/{filename}."""

    def test_unknown_file(self, client):
        response = client.get("/v1/files/missing_0123456789ab.fdx")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "NotFoundException"

    def test_invalid_name(self, client):
        response = client.get("/v1/files/notes.txt")
        assert response.status_code == status.HTTP_404_NOT_FOUND
