"""Escalation tool schema and the parsed stage-1 decision.

The decision is a tagged union so the caller matches on the type instead of
probing optional fields.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from support_rag.application.ports.llm_port import LLMCompletion
from support_rag.domain.errors import ToolSelectionAmbiguous
from support_rag.domain.models import EscalationCategory

ESCALATION_TOOL_NAME = "create_ticket"
DEFAULT_TOOL_MESSAGE = "A ticket will be created to assist you with your request."


class EscalationToolArguments(BaseModel):
    """Arguments the model sends with a ``create_ticket`` call."""

    model_config = ConfigDict(extra="ignore")

    ticket_category: str = Field(..., min_length=1)
    message: str | None = Field(default=None)


@dataclass(frozen=True)
class ToolInvoked:
    category: EscalationCategory
    explanation: str


@dataclass(frozen=True)
class NoToolCall:
    content: str | None = None


ToolDecision = ToolInvoked | NoToolCall


def build_escalation_tool(categories: Sequence[EscalationCategory]) -> list[dict[str, Any]]:
    """OpenAI function-tool definition; the category enum is the list of names."""
    return [
        {
            "type": "function",
            "function": {
                "name": ESCALATION_TOOL_NAME,
                "description": (
                    "Create a new support ticket for the user when they need human assistance, "
                    "have complex issues, technical problems, or are not satisfied with the AI "
                    "response. Use this tool when the user's question requires staff intervention."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "ticket_category": {
                            "type": "string",
                            "description": (
                                "The ticket category to create the ticket in. Choose the most "
                                "appropriate category based on the user's issue."
                            ),
                            "enum": [c.name for c in categories],
                        },
                        "message": {
                            "type": "string",
                            "description": (
                                "Reply message to the user summarizing their issue and confirming "
                                "the ticket creation. Include any relevant details from the "
                                "conversation."
                            ),
                        },
                    },
                    "required": ["ticket_category", "message"],
                    "additionalProperties": False,
                },
            },
        }
    ]


def parse_tool_decision(
    completion: LLMCompletion, categories: Sequence[EscalationCategory]
) -> ToolDecision:
    """Turn a stage-1 completion into a decision.

    Only the first tool call is considered. Raises ``ToolSelectionAmbiguous``
    when the model called the escalation tool with arguments that do not
    validate or name an unknown category.
    """
    for call in completion.tool_calls[:1]:
        if call.name != ESCALATION_TOOL_NAME:
            break
        try:
            args = EscalationToolArguments.model_validate_json(call.arguments or "{}")
        except PydanticValidationError as ex:
            raise ToolSelectionAmbiguous(f"invalid {ESCALATION_TOOL_NAME} arguments: {ex}") from ex
        selected = next((c for c in categories if c.name == args.ticket_category), None)
        if selected is None:
            raise ToolSelectionAmbiguous(f"unknown ticket category {args.ticket_category!r}")
        return ToolInvoked(category=selected, explanation=args.message or DEFAULT_TOOL_MESSAGE)
    return NoToolCall(content=completion.content)
