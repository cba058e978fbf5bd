"""Moderation policy taxonomy.

Priority tiers, violation categories and the example-driven definitions that
the classifier prompt and the feedback analyzer share. Changing tier
thresholds or examples means editing only this module.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Priority(str, Enum):
    """Severity tier of flagged content, ordered low < medium < high < critical."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank >= other.rank


_PRIORITY_RANK = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.CRITICAL: 3,
}


class Category(str, Enum):
    """Policy-violation type assigned to content."""
    SEXUAL_CONTENT = "sexual_content"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    HARASSMENT_BULLYING = "harassment_bullying"
    FALSE_INFORMATION = "false_information"
    PRIVACY_VIOLATION = "privacy_violation"
    SPAM = "spam"
    OTHER = "other"


class Action(str, Enum):
    """Action the classifier recommends for a piece of content."""
    REMOVE = "remove"
    HIDE = "hide"
    REVIEW = "review"
    COACH = "coach"
    NONE = "none"


# Conservative values used whenever the model output cannot be trusted
DEFAULT_PRIORITY = Priority.MEDIUM
DEFAULT_CATEGORY = Category.OTHER
DEFAULT_ACTION = Action.REVIEW


@dataclass(frozen=True)
class TierDefinition:
    """Definition of one priority tier."""
    priority: Priority
    label: str
    action: Action
    action_description: str
    examples: dict[Category, tuple[str, ...]]
    notes: tuple[str, ...] = ()


TIERS: dict[Priority, TierDefinition] = {
    Priority.CRITICAL: TierDefinition(
        priority=Priority.CRITICAL,
        label="CRITICAL (Immediate Removal & Review)",
        action=Action.REMOVE,
        action_description="Auto-flag + immediate shadowban/quarantine",
        examples={
            Category.SEXUAL_CONTENT: (
                "Looking for a hookup after church",
                "explicit sexual requests/solicitation",
            ),
            Category.INAPPROPRIATE_CONTENT: (
                "Blasphemy",
                "Jesus was a fraud. Christians are sheep",
            ),
            Category.HARASSMENT_BULLYING: (
                "Personal attacks",
                "Everyone should avoid John. He's a pervert",
            ),
            Category.FALSE_INFORMATION: (
                "Tithing is optional. Jesus never told anyone to give",
            ),
            Category.PRIVACY_VIOLATION: (
                "Sharing SSN, bank info, sensitive personal data",
            ),
            Category.SPAM: (
                "Buy Bitcoin now! Click here to invest with me",
            ),
        },
        notes=(
            "Violence threats: bombs, killing, weapons, harm, destruction",
            "Predatory behavior toward minors: \"young ones\", grooming language",
            "Devil worship, satan worship solicitation",
            "Adult targeting minors: \"young ones\", \"kids\"",
            "Explicit sexual content + any text combination",
        ),
    ),
    Priority.HIGH: TierDefinition(
        priority=Priority.HIGH,
        label="HIGH (Likely Harmful or Spiritually Disruptive)",
        action=Action.HIDE,
        action_description="Warn user + send to human moderator",
        examples={
            Category.SEXUAL_CONTENT: (
                "Is it okay if I post thirst traps as long as I quote scripture?",
            ),
            Category.INAPPROPRIATE_CONTENT: (
                "The Bible supports slavery. Read it again.",
            ),
            Category.HARASSMENT_BULLYING: (
                "The youth group is full of losers and sinners.",
            ),
            Category.FALSE_INFORMATION: (
                "Prayer is more powerful than medicine. Don't take pills—just pray.",
            ),
            Category.PRIVACY_VIOLATION: (
                "Sharing OTHER people's personal info, especially for sale",
            ),
            Category.SPAM: (
                "Join my crypto church—Jesus loves passive income",
            ),
        },
    ),
    Priority.MEDIUM: TierDefinition(
        priority=Priority.MEDIUM,
        label="MEDIUM (Unhelpful or Distracting)",
        action=Action.REVIEW,
        action_description="AI response with correction, throttle reach",
        examples={
            Category.SEXUAL_CONTENT: (
                "Can Christian couples use sex toys? Just asking here.",
            ),
            Category.INAPPROPRIATE_CONTENT: (
                "Catholics aren't real Christians.",
            ),
            Category.HARASSMENT_BULLYING: (
                "You're obviously not a real believer if you feel depressed.",
            ),
            Category.FALSE_INFORMATION: (
                "The rapture is happening next Friday. Be ready!",
            ),
            Category.PRIVACY_VIOLATION: (
                "I saw Pastor at a bar last night—posting this anonymously.",
            ),
            Category.SPAM: (
                "Check out my YouTube channel where I expose all church pastors.",
            ),
        },
        notes=(
            "Sharing your own personal info (phone, address) is generally OK. "
            "Only flag sharing OTHER people's info without consent.",
        ),
    ),
    Priority.LOW: TierDefinition(
        priority=Priority.LOW,
        label="LOW (Minor Issues or Off-topic)",
        action=Action.COACH,
        action_description="AI coach guidance, allow with soft moderation",
        examples={
            Category.SEXUAL_CONTENT: ("Is attraction a sin?",),
            Category.INAPPROPRIATE_CONTENT: ("I feel like sermons are boring sometimes.",),
            Category.HARASSMENT_BULLYING: (
                "Your prayer request seems dramatic. Just my opinion.",
            ),
            Category.FALSE_INFORMATION: ("Jesus probably spoke English, right?",),
            Category.SPAM: ("Come to our revival event! Free pizza",),
        },
    ),
}


def is_valid_priority(value: Any) -> bool:
    """Check whether value names a priority tier."""
    return isinstance(value, str) and value in Priority._value2member_map_


def is_valid_category(value: Any) -> bool:
    """Check whether value names a violation category."""
    return isinstance(value, str) and value in Category._value2member_map_


def is_valid_action(value: Any) -> bool:
    """Check whether value names a recommended action."""
    return isinstance(value, str) and value in Action._value2member_map_


def coerce_priority(value: Any) -> Priority:
    """Return the matching Priority, or the conservative default."""
    if isinstance(value, Priority):
        return value
    if is_valid_priority(value):
        return Priority(value)
    return DEFAULT_PRIORITY


def coerce_category(value: Any) -> Category:
    """Return the matching Category, or ``other``."""
    if isinstance(value, Category):
        return value
    if is_valid_category(value):
        return Category(value)
    return DEFAULT_CATEGORY


def coerce_action(value: Any) -> Action:
    """Return the matching Action, or ``review``. Never ``none``."""
    if isinstance(value, Action):
        return value
    if is_valid_action(value):
        return Action(value)
    return DEFAULT_ACTION


def action_for(priority: Priority) -> Action:
    """Action required by a priority tier."""
    return TIERS[priority].action
