import json
from datetime import datetime

import requests

from models.models import Task
from services.ai_task_assistant import UNAVAILABLE_MESSAGE, AiTaskAssistant, build_prompt


def make_response(status_code, body):
    r = requests.Response()
    r.status_code = status_code
    r.reason = "OK" if status_code < 400 else "Error"
    r.url = "http://llm.test/v1/chat/completions"
    r._content = json.dumps(body).encode()
    return r


class StubHttp:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def make_task(**kwargs):
    fields = dict(title="Migrate billing", project_id=1, creator_id=1, priority="HIGH")
    fields.update(kwargs)
    return Task(**fields)


def assistant_with(http):
    return AiTaskAssistant("http://llm.test/v1/", "sk-test", "plan-model", http=http)


def test_prompt_includes_task_details():
    task = make_task(description="Move to new provider", deadline=datetime(2030, 5, 1, 17, 30), estimated_hours=12)
    prompt = build_prompt(task)
    assert "Task: Migrate billing" in prompt
    assert "Description: Move to new provider" in prompt
    assert "Priority: HIGH" in prompt
    assert "Deadline: 2030-05-01 17:30" in prompt
    assert "Estimated Hours: 12 hours" in prompt


def test_prompt_placeholders_for_missing_fields():
    prompt = build_prompt(make_task())
    assert "No description provided" in prompt
    assert "No deadline set" in prompt
    assert "Estimated Hours: Not specified" in prompt


def test_returns_first_choice_content():
    body = {"choices": [{"message": {"role": "assistant", "content": "1. Audit invoices"}}]}
    http = StubHttp(make_response(200, body))

    plan = assistant_with(http).generate_task_plan(make_task())

    assert plan == "1. Audit invoices"
    call = http.calls[0]
    assert call["url"] == "http://llm.test/v1/chat/completions"
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["json"]["model"] == "plan-model"
    assert call["json"]["max_tokens"] == 1024
    assert call["json"]["messages"][0]["role"] == "user"


def test_unexpected_payload_returns_fallback_message():
    http = StubHttp(make_response(200, {"choices": []}))
    assert assistant_with(http).generate_task_plan(make_task()) == UNAVAILABLE_MESSAGE


def test_transport_error_is_reported_in_plan():
    http = StubHttp(error=requests.ConnectionError("connection refused"))
    plan = assistant_with(http).generate_task_plan(make_task())
    assert plan.startswith("Error generating AI task plan:")
    assert "connection refused" in plan


def test_http_error_is_reported_in_plan():
    http = StubHttp(make_response(503, {"error": "overloaded"}))
    plan = assistant_with(http).generate_task_plan(make_task())
    assert plan.startswith("Error generating AI task plan:")
