"""Classification prompt assembly.

The prompt is built from named stages so each can be tested on its own:
taxonomy instructions, learned context, response format, and the content
being classified.
"""

from soapbox_moderation.services.anthropic_client import CompletionRequest
from soapbox_moderation.taxonomy import TIERS, Action, Category, Priority, action_for

INTRO = (
    "You are an advanced AI content moderator for a faith-based community platform. "
    "Classify content using this EXACT priority system:"
)

# Highest severity first
TIER_ORDER = (Priority.CRITICAL, Priority.HIGH, Priority.MEDIUM, Priority.LOW)


class PromptBuilder:
    """Assembles the system prompt and user message for one classification."""

    def __init__(self, temperature: float = 0.1):
        self.temperature = temperature

    def taxonomy_block(self) -> str:
        """Static tier definitions with examples and required actions."""
        sections = []
        for priority in TIER_ORDER:
            tier = TIERS[priority]
            lines = [f"{tier.label} - actionRequired: \"{action_for(priority).value}\":"]
            for category, examples in tier.examples.items():
                quoted = ", ".join(f"\"{example}\"" for example in examples)
                lines.append(f"- {category.value}: {quoted}")
            for note in tier.notes:
                lines.append(f"- {note}")
            lines.append(f"ACTION: {tier.action_description}")
            sections.append("\n".join(lines))
        return "\n\n".join(sections)

    def context_block(self, context: str) -> str:
        """Lessons learned from recent moderator corrections."""
        return f"LEARNING FROM PAST DECISIONS:\n{context}"

    def response_format_block(self) -> str:
        """Instructions for the JSON object the model must return."""
        priorities = "|".join(p.value for p in TIER_ORDER)
        categories = "|".join(c.value for c in Category)
        actions = "|".join(a.value for a in Action)
        return (
            "IMPORTANT: Respond with ONLY valid JSON, no code blocks or markdown formatting:\n"
            "{\n"
            "  \"flagged\": boolean,\n"
            f"  \"priority\": \"{priorities}\",\n"
            f"  \"category\": \"{categories}\",\n"
            "  \"violations\": [\"specific violation types\"],\n"
            "  \"reason\": \"detailed explanation\",\n"
            "  \"confidence\": 0.0-1.0,\n"
            f"  \"actionRequired\": \"{actions}\",\n"
            "  \"learningNote\": \"what this case teaches about classification\"\n"
            "}"
        )

    def content_block(self, content: str, content_type: str) -> str:
        """The content under review."""
        return f"Analyze this {content_type}: \"{content}\""

    def system_prompt(self, context: str) -> str:
        """Combine the static and learned stages into the system prompt."""
        return "\n\n".join([
            INTRO,
            self.taxonomy_block(),
            self.context_block(context),
            self.response_format_block(),
        ])

    def build(self, content: str, content_type: str, context: str) -> CompletionRequest:
        """Build the full completion request."""
        return CompletionRequest(
            system_prompt=self.system_prompt(context),
            user_message=self.content_block(content, content_type),
            temperature=self.temperature,
        )
