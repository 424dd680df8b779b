"""System prompts and canned replies of the chatbot."""

from __future__ import annotations

from support_rag.domain.models import ChatbotConfig

DECLINE_REPLY = "I understand you don't need a ticket right now. Feel free to ask me anything else!"
DECLINE_NOTICE = "Ticket creation has been cancelled."
ESCALATION_APOLOGY = (
    "I apologize, but there was an issue creating your ticket. "
    "Please try again or contact an administrator."
)

_GUIDELINES = """
Guidelines:
- Be helpful, informative, and engaging
- Keep responses concise but thorough
- Use chat-friendly formatting when appropriate
- If you don't know something, say so honestly
- Stay in character as {name}
- Answer questions directly without suggesting tickets unless explicitly needed"""

_TOOL_GUIDELINES = """

IMPORTANT - Ticket Creation Tool Guidelines:
ONLY use the create_ticket tool when:
- User EXPLICITLY asks to "create a ticket", "open a ticket", "talk to support", or "contact staff"
- User clearly expresses frustration and wants human help after you've provided assistance
- User has a complex technical issue that requires server admin intervention
- User is reporting bugs, server problems, or policy violations
- User specifically requests to escalate their issue

DO NOT use the create_ticket tool when:
- User is asking general questions you can answer
- User is just having a normal conversation
- User's question can be resolved with information or guidance
- User hasn't indicated they need human assistance
- This is the user's first question about a topic

Be conservative with ticket creation. Always try to help the user first with a direct answer. \
Only suggest tickets when the user clearly needs human intervention or explicitly requests it."""

_CONTEXT = """

You have access to specific knowledge about this server/topic. \
Use the following context to answer questions when relevant:

{context}

When using this context:
- Reference the information naturally in your response
- If the context is relevant, use it to provide accurate, detailed answers
- If the context doesn't relate to the question, you can still provide general help
- Don't mention that you're using "context" or "knowledge base" explicitly"""


def build_system_prompt(
    config: ChatbotConfig, context: str | None, *, include_tools: bool = False
) -> str:
    prompt = f"You are {config.chatbot_name}, an AI assistant in a community chat server. "
    if config.response_type and config.response_type.strip():
        prompt += f"Your personality and response style: {config.response_type}. "
    prompt += _GUIDELINES.format(name=config.chatbot_name)
    if include_tools:
        prompt += _TOOL_GUIDELINES
    if context:
        prompt += _CONTEXT.format(context=context)
    return prompt


def escalation_success_reply(ticket_number: int | None, resource_ref: str) -> str:
    label = f"ticket #{ticket_number}" if ticket_number is not None else "a ticket"
    return (
        f"I've created {label} for you. You can find it here: {resource_ref}. "
        "A staff member will assist you shortly!"
    )


def escalation_success_notice(resource_ref: str) -> str:
    return f"Ticket created successfully! Please check {resource_ref} for further assistance."


def preview(text: str, limit: int = 100) -> str:
    return text if len(text) <= limit else text[:limit] + "..."
