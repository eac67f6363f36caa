"""OpenAI Assistants (v2) client: one thread per user, runs polled with a deadline."""

import threading
import time
from collections import OrderedDict
from typing import Optional

import httpx

from wabot.logging_config import get_logger
from wabot.services.assistant.base import AssistantError, AssistantTimeoutError, ReplyGenerator

logger = get_logger("assistant.openai")

TERMINAL_RUN_STATUSES = {"completed", "failed", "cancelled", "expired", "incomplete"}
NO_RESPONSE = "No response from assistant."
CONTEXT_INSTRUCTIONS = (
    "Messages may start with a bracketed user context block. Use it to personalise the answer, "
    "never repeat it verbatim and never reveal data the user did not ask about."
)


class OpenAIAssistantService(ReplyGenerator):
    BASE_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        api_key: str,
        assistant_id: str,
        storage=None,
        run_timeout_seconds: float = 60.0,
        poll_interval_seconds: float = 1.0,
        request_timeout_seconds: float = 30.0,
        max_cached_threads: int = 1000,
    ):
        if not api_key:
            raise ValueError("OpenAI API key is not configured")
        if not assistant_id:
            raise ValueError("OpenAI Assistant ID is not configured")
        self.api_key = api_key
        self.assistant_id = assistant_id
        self.storage = storage
        self.run_timeout_seconds = run_timeout_seconds
        self.poll_interval_seconds = poll_interval_seconds
        self.request_timeout_seconds = request_timeout_seconds
        self.max_cached_threads = max_cached_threads
        # Least recently used first
        self._user_threads: "OrderedDict[str, str]" = OrderedDict()
        self._threads_lock = threading.Lock()

    @property
    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "OpenAI-Beta": "assistants=v2",
        }

    def _request(self, client: httpx.Client, method: str, path: str, **kwargs) -> dict:
        response = client.request(method, f"{self.BASE_URL}{path}", headers=self._headers, **kwargs)
        if response.status_code >= 400:
            logger.error(f"OpenAI assistants error on {method} {path}: {response.status_code} {response.text}")
            raise AssistantError(f"OpenAI assistants API error: {response.status_code} - {response.text}")
        return response.json()

    def _stored_thread(self, user_id: str) -> Optional[str]:
        if self.storage is None:
            return None
        user = self.storage.get_user(user_id)
        if user is not None and user.thread_id:
            return user.thread_id
        return None

    def create_or_get_thread(self, user_id: str) -> str:
        with self._threads_lock:
            thread_id = self._user_threads.get(user_id)
            if thread_id:
                self._user_threads.move_to_end(user_id)
        if thread_id:
            return thread_id

        thread_id = self._stored_thread(user_id)
        if not thread_id:
            with httpx.Client(timeout=self.request_timeout_seconds) as client:
                data = self._request(client, "POST", "/threads", json={})
            thread_id = data["id"]
            logger.info(f"Created assistant thread {thread_id} for {user_id}")

        with self._threads_lock:
            self._user_threads[user_id] = thread_id
            self._user_threads.move_to_end(user_id)
            while len(self._user_threads) > self.max_cached_threads:
                self._user_threads.popitem(last=False)
        return thread_id

    def get_reply(self, thread_id: str, message: str) -> str:
        return self._run(thread_id, message)

    def get_reply_with_context(self, thread_id: str, contextual_message: str) -> str:
        return self._run(thread_id, contextual_message, additional_instructions=CONTEXT_INSTRUCTIONS)

    def _run(self, thread_id: str, message: str, additional_instructions: Optional[str] = None) -> str:
        with httpx.Client(timeout=self.request_timeout_seconds) as client:
            self._request(
                client,
                "POST",
                f"/threads/{thread_id}/messages",
                json={"role": "user", "content": message},
            )

            payload = {"assistant_id": self.assistant_id}
            if additional_instructions:
                payload["additional_instructions"] = additional_instructions
            run = self._request(client, "POST", f"/threads/{thread_id}/runs", json=payload)

            run = self._wait_for_run(client, thread_id, run)
            if run.get("status") != "completed":
                last_error = (run.get("last_error") or {}).get("message")
                raise AssistantError(f"Assistant run {run.get('status')}: {last_error or 'no details'}")

            messages = self._request(
                client,
                "GET",
                f"/threads/{thread_id}/messages",
                params={"order": "desc", "limit": 20, "run_id": run["id"]},
            )

        for item in messages.get("data", []):
            if item.get("role") != "assistant":
                continue
            for content in item.get("content", []):
                if content.get("type") == "text":
                    return content["text"]["value"]
        return NO_RESPONSE

    def _wait_for_run(self, client: httpx.Client, thread_id: str, run: dict) -> dict:
        deadline = time.monotonic() + self.run_timeout_seconds
        while run.get("status") not in TERMINAL_RUN_STATUSES:
            if run.get("status") == "requires_action":
                self._cancel_run(client, thread_id, run["id"])
                raise AssistantError("Assistant run requires tool outputs, which are not supported")
            if time.monotonic() >= deadline:
                self._cancel_run(client, thread_id, run["id"])
                raise AssistantTimeoutError(
                    f"Assistant run {run['id']} did not finish within {self.run_timeout_seconds}s"
                )
            time.sleep(self.poll_interval_seconds)
            run = self._request(client, "GET", f"/threads/{thread_id}/runs/{run['id']}")
        return run

    def _cancel_run(self, client: httpx.Client, thread_id: str, run_id: str) -> None:
        try:
            self._request(client, "POST", f"/threads/{thread_id}/runs/{run_id}/cancel")
        except (AssistantError, httpx.HTTPError) as e:
            logger.warning(f"Failed to cancel run {run_id}: {e}")
