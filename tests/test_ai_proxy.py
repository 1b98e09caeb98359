from google.genai import errors as genai_errors

from taskmanager.api.generation import GenerationError, InvalidApiKeyError, classify_vendor_error


class TestGenerateEndpoint:
    def test_success_returns_generated_text(self, client, generator):
        generator.text = '{"ok": true}'
        res = client.post("/api/ai/generate", json={"prompt": "hi", "apiKey": "k-123", "maxTokens": 50})
        assert res.status_code == 200
        assert res.json() == {"generatedText": '{"ok": true}', "success": True}
        assert generator.calls == [("hi", "k-123", 50)]

    def test_default_token_budget(self, client, generator):
        client.post("/api/ai/generate", json={"prompt": "hi", "apiKey": "k"})
        assert generator.calls[0][2] == 2000

    def test_missing_api_key_fails_fast(self, client, generator):
        for body in ({"prompt": "hi"}, {"prompt": "hi", "apiKey": ""}, {"prompt": "hi", "apiKey": "   "}):
            res = client.post("/api/ai/generate", json=body)
            assert res.status_code == 400
            assert res.json() == {"error": "API key is required", "success": False}
        assert generator.calls == []

    def test_invalid_key_is_client_error(self, client, generator):
        generator.error = InvalidApiKeyError("API key not valid. Please pass a valid API key.", status_code=400)
        res = client.post("/api/ai/generate", json={"prompt": "hi", "apiKey": "bad"})
        assert res.status_code == 401
        body = res.json()
        assert body["error"] == "Invalid Gemini API key"
        assert body["success"] is False

    def test_upstream_failure_carries_message_verbatim(self, client, generator):
        generator.error = GenerationError("quota exceeded for model xyz", status_code=429)
        res = client.post("/api/ai/generate", json={"prompt": "hi", "apiKey": "k"})
        assert res.status_code == 500
        assert res.json() == {
            "error": "Failed to generate AI response",
            "message": "quota exceeded for model xyz",
            "success": False,
        }

    def test_upstream_unavailable_maps_to_503(self, client, generator):
        generator.error = GenerationError("The model is overloaded", status_code=503)
        res = client.post("/api/ai/generate", json={"prompt": "hi", "apiKey": "k"})
        assert res.status_code == 503
        assert res.json()["message"] == "The model is overloaded"
        assert res.json()["success"] is False

    def test_missing_prompt_is_validation_error(self, client, generator):
        res = client.post("/api/ai/generate", json={"apiKey": "k"})
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"


class TestClassifyVendorError:
    def test_api_key_invalid_marker(self):
        exc = genai_errors.ClientError(
            400,
            {
                "error": {
                    "code": 400,
                    "message": "API key not valid. Please pass a valid API key.",
                    "status": "INVALID_ARGUMENT",
                }
            },
        )
        result = classify_vendor_error(exc)
        assert isinstance(result, InvalidApiKeyError)
        assert result.message == "API key not valid. Please pass a valid API key."

    def test_forbidden_is_invalid_key(self):
        exc = genai_errors.ClientError(
            403, {"error": {"code": 403, "message": "Permission denied", "status": "PERMISSION_DENIED"}}
        )
        assert isinstance(classify_vendor_error(exc), InvalidApiKeyError)

    def test_server_error_keeps_code_and_message(self):
        exc = genai_errors.ServerError(
            503, {"error": {"code": 503, "message": "The model is overloaded.", "status": "UNAVAILABLE"}}
        )
        result = classify_vendor_error(exc)
        assert type(result) is GenerationError
        assert result.status_code == 503
        assert result.message == "The model is overloaded."

    def test_non_sdk_exception(self):
        result = classify_vendor_error(ConnectionError("connection reset"))
        assert type(result) is GenerationError
        assert result.status_code is None
        assert result.message == "connection reset"
