# services/ai_task_assistant.py
import logging
from typing import Optional

import requests

from core.config import Settings
from models.models import Task

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Unable to generate AI task plan at this time."

PROMPT_TEMPLATE = (
    "You are an AI assistant for project management. "
    "Create a personalized task plan for the following task:\n\n"
    "Task: {title}\n"
    "Description: {description}\n"
    "Priority: {priority}\n"
    "Deadline: {deadline}\n"
    "Estimated Hours: {estimated}\n\n"
    "Based on this information, provide a detailed plan including:\n"
    "1. A recommended time schedule with milestones\n"
    "2. Suggestions for breaking down the task into smaller steps\n"
    "3. Best practices for approaching this type of task\n"
    "4. Tips for managing time efficiently given the priority and deadline\n"
    "Format the response in a clear, concise way that's easy to follow."
)


def build_prompt(task: Task) -> str:
    return PROMPT_TEMPLATE.format(
        title=task.title,
        description=task.description or "No description provided",
        priority=task.priority,
        deadline=task.deadline.strftime("%Y-%m-%d %H:%M") if task.deadline else "No deadline set",
        estimated=f"{task.estimated_hours} hours" if task.estimated_hours is not None else "Not specified",
    )


class AiTaskAssistant:
    """Asks an OpenAI-compatible chat-completions endpoint for a task plan."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str],
        model: str,
        completions_path: str = "/chat/completions",
        timeout: float = 30.0,
        http: Optional[requests.Session] = None,
    ):
        self.url = base_url.rstrip("/") + completions_path
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.http = http or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "AiTaskAssistant":
        return cls(
            settings.LLM_BASE_URL,
            settings.LLM_API_KEY,
            settings.LLM_MODEL,
            completions_path=settings.LLM_COMPLETIONS_PATH,
        )

    def generate_task_plan(self, task: Task) -> str:
        logger.info("🤖 Generating AI task plan for task %s", task.id)
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": build_prompt(task)}],
            "max_tokens": 1024,
            "temperature": 0.7,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key or ''}",
            "Content-Type": "application/json",
        }

        try:
            r = self.http.post(self.url, headers=headers, json=payload, timeout=self.timeout)
            r.raise_for_status()
            body = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("❌ Error generating AI task plan: %s", e)
            return f"Error generating AI task plan: {e}"

        try:
            return body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            logger.info("Unexpected completion payload: %s", body)
            return UNAVAILABLE_MESSAGE
