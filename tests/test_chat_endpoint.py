import unittest

import openai
from fastapi.testclient import TestClient

from chat_relay.api.deps import get_chat_service
from chat_relay.core.exceptions import OpenAIException
from chat_relay.main import create_app
from chat_relay.prompts.crm import CRM_SYSTEM_PROMPT
from helpers import make_service, make_settings, openai_request, status_error

EMPTY_MESSAGE = {"error": "Message is required and must be a non-empty string"}


class ChatEndpointTest(unittest.TestCase):
    def setUp(self) -> None:
        self.service = make_service(
            reply="Dashboard: [Dashboard](https://example/dashboard)",
            system_prompt=CRM_SYSTEM_PROMPT,
        )
        self.create = self.service.client.chat.completions.create
        self.app = create_app(make_settings(), chat_service=self.service)
        self.client = TestClient(self.app)

    def test_relays_first_choice(self) -> None:
        response = self.client.post("/api/chat", json={"message": "go to dashboard"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"reply": "Dashboard: [Dashboard](https://example/dashboard)"})

    def test_forwards_trimmed_message_with_system_prompt(self) -> None:
        self.client.post("/api/chat", json={"message": "  where can I see my salary slip \n"})

        self.create.assert_awaited_once()
        messages = self.create.await_args.kwargs["messages"]
        self.assertEqual(messages[0], {"role": "system", "content": CRM_SYSTEM_PROMPT})
        self.assertEqual(messages[1], {"role": "user", "content": "where can I see my salary slip"})

    def test_forwards_message_trimmed_of_unicode_whitespace(self) -> None:
        self.client.post("/api/chat", json={"message": "\ufeff\u00a0go to dashboard\u2029 "})

        messages = self.create.await_args.kwargs["messages"]
        self.assertEqual(messages[1]["content"], "go to dashboard")

    def test_invalid_messages_are_rejected_without_upstream_call(self) -> None:
        bodies = [
            {},
            {"message": None},
            {"message": ""},
            {"message": "   "},
            {"message": "\n\t"},
            {"message": "\ufeff"},
            {"message": " \ufeff "},
            {"message": "\u00a0\u3000\u2028"},
            {"message": 42},
            {"message": ["hello"]},
            {"message": {"text": "hello"}},
            {"text": "hello"},
        ]
        for body in bodies:
            with self.subTest(body=body):
                response = self.client.post("/api/chat", json=body)

                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json(), EMPTY_MESSAGE)
        self.create.assert_not_awaited()

    def test_missing_body_is_rejected(self) -> None:
        response = self.client.post("/api/chat")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), EMPTY_MESSAGE)
        self.create.assert_not_awaited()

    def test_upstream_rate_limit_maps_to_429(self) -> None:
        self.create.side_effect = status_error(openai.RateLimitError, 429)

        response = self.client.post("/api/chat", json={"message": "hello"})

        self.assertEqual(response.status_code, 429)
        self.assertIn("Rate limit", response.json()["error"])

    def test_upstream_auth_failure_maps_to_401(self) -> None:
        self.create.side_effect = status_error(openai.AuthenticationError, 401)

        response = self.client.post("/api/chat", json={"message": "hello"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(
            response.json(), {"error": "Invalid OpenAI API key. Please contact the administrator."}
        )

    def test_upstream_bad_request_maps_to_400(self) -> None:
        self.create.side_effect = status_error(openai.BadRequestError, 400)

        response = self.client.post("/api/chat", json={"message": "hello"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(), {"error": "Invalid request to OpenAI API. Please check your message."}
        )

    def test_other_failures_map_to_500_with_details(self) -> None:
        errors = [
            openai.APITimeoutError(request=openai_request()),
            openai.APIConnectionError(request=openai_request()),
            status_error(openai.InternalServerError, 502, message="bad gateway"),
            RuntimeError("unexpected shape"),
        ]
        for error in errors:
            with self.subTest(error=type(error).__name__):
                self.create.side_effect = error

                response = self.client.post("/api/chat", json={"message": "hello"})

                self.assertEqual(response.status_code, 500)
                body = response.json()
                self.assertEqual(body["error"], "Failed to fetch response from OpenAI.")
                self.assertTrue(body["details"])
                self.assertEqual(
                    body["suggestion"],
                    "Please try again later or contact support if the issue persists.",
                )

    def test_exactly_one_upstream_call_per_request(self) -> None:
        self.create.side_effect = status_error(openai.RateLimitError, 429)

        self.client.post("/api/chat", json={"message": "hello"})

        self.assertEqual(self.create.await_count, 1)

    def test_status_tagged_stub_error(self) -> None:
        class RateLimitedService:
            async def get_chat_response(self, message: str) -> str:
                raise OpenAIException("slow down", status_code=429)

        self.app.dependency_overrides[get_chat_service] = RateLimitedService

        response = self.client.post("/api/chat", json={"message": "hello"})

        self.assertEqual(response.status_code, 429)
        self.assertIn("rate limit", response.json()["error"].lower())

    def test_response_carries_request_id(self) -> None:
        response = self.client.post(
            "/api/chat", json={"message": "hello"}, headers={"X-Request-ID": "abc-123"}
        )

        self.assertEqual(response.headers["x-request-id"], "abc-123")


class HealthEndpointTest(unittest.TestCase):
    def test_health_is_independent_of_upstream(self) -> None:
        service = make_service(error=openai.APIConnectionError(request=openai_request()))
        client = TestClient(create_app(make_settings(), chat_service=service))

        response = client.get("/api/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "OK", "message": "Server is running"})
        service.client.chat.completions.create.assert_not_awaited()
