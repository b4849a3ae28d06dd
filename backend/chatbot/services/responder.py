"""Rule-based response generator.

Categories are checked in order and the first one with a keyword contained in
the lowercased input wins. Within a category the reply is picked at random.
Input that matches nothing gets one of the default replies.
"""

import random
from dataclasses import dataclass
from typing import Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def choice(self, seq: Sequence[T]) -> T: ...


@dataclass(frozen=True)
class Category:
    name: str
    keywords: tuple[str, ...]
    responses: tuple[str, ...]

    def matches(self, normalized: str) -> bool:
        return any(keyword in normalized for keyword in self.keywords)


# Order matters: "hi" also matches "this" or "which", so greeting shadows
# every later category for such input.
RESPONSE_CATEGORIES: tuple[Category, ...] = (
    Category(
        name="greeting",
        keywords=("hello", "hi", "hey", "good morning", "good afternoon", "good evening"),
        responses=(
            "Hello! 👋 How can I help you today?",
            "Hi there! 😊 What can I assist you with?",
            "Hey! Great to see you here. What's on your mind?",
            "Hello! I'm here and ready to help with whatever you need!",
        ),
    ),
    Category(
        name="help",
        keywords=("help", "assist", "support", "what can you do"),
        responses=(
            "I'm here to help! 🤖 I can answer questions, provide explanations, help with "
            "problem-solving, engage in conversations, and much more. What specific topic "
            "would you like assistance with?",
        ),
    ),
    Category(
        name="joke",
        keywords=("joke", "funny", "laugh", "humor"),
        responses=(
            "Why don't scientists trust atoms? Because they make up everything! 😄",
            "I told my wife she was drawing her eyebrows too high. She looked surprised! 😂",
            "Why don't programmers like nature? It has too many bugs! 🐛",
            "What do you call a bear with no teeth? A gummy bear! 🐻",
        ),
    ),
    Category(
        name="weather",
        keywords=("weather", "temperature", "rain", "sunny", "cloudy"),
        responses=(
            "I don't have access to real-time weather data, but I'd recommend checking your "
            "local weather service or a weather app for current conditions! ☀️🌧️ Is there "
            "anything else I can help you with?",
        ),
    ),
    Category(
        name="cooking",
        keywords=("cook", "recipe", "food", "eat", "hungry", "meal"),
        responses=(
            "I'd love to help with cooking! 👨‍🍳 While I can't see your specific question in "
            "detail, I can help with recipes, cooking techniques, ingredient substitutions, "
            "and meal planning. What specific dish or cooking question do you have?",
        ),
    ),
    Category(
        name="time",
        keywords=("time", "date", "today", "now", "current"),
        responses=(
            "I don't have access to real-time information, but you can check the current time "
            "and date on your device! ⏰ Is there anything else I can help you with?",
        ),
    ),
    Category(
        name="technology",
        keywords=("computer", "technology", "software", "programming", "code"),
        responses=(
            "I love talking about technology! 💻 I can help with programming concepts, software "
            "recommendations, troubleshooting, and general tech questions. What specific tech "
            "topic interests you?",
        ),
    ),
    Category(
        name="gratitude",
        keywords=("thank", "thanks", "appreciate", "grateful"),
        responses=(
            "You're very welcome! 😊 Happy to help anytime!",
            "My pleasure! That's what I'm here for! 🤗",
            "You're welcome! Feel free to ask if you need anything else!",
            "Glad I could help! Don't hesitate to reach out again! 👍",
        ),
    ),
    Category(
        name="farewell",
        keywords=("bye", "goodbye", "see you", "farewell", "later"),
        responses=(
            "Goodbye! 👋 Take care and come back anytime!",
            "See you later! 😊 It was great chatting with you!",
            "Farewell! Hope to talk with you again soon! 🌟",
            "Bye! Have a wonderful day ahead! ☀️",
        ),
    ),
)

DEFAULT_RESPONSES: tuple[str, ...] = (
    "That's interesting! 🤔 Could you tell me more about what you're looking for?",
    "I'd be happy to help! Can you provide a bit more context about your question?",
    "Great question! 💭 Let me think about that... Could you elaborate on what specifically "
    "you'd like to know?",
    "I'm here to assist! 🤖 What particular aspect of this topic would you like to explore?",
    "Thanks for sharing that with me! What would you like to know or discuss about it?",
    "Interesting topic! 🌟 Is there a specific question you have or something particular "
    "you'd like help with?",
)


class ResponseGenerator:
    def __init__(
        self,
        rng: RandomSource | None = None,
        categories: Sequence[Category] = RESPONSE_CATEGORIES,
        default_responses: Sequence[str] = DEFAULT_RESPONSES,
    ) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._categories = tuple(categories)
        self._default_responses = tuple(default_responses)

    def match_category(self, text: str) -> Category | None:
        """Return the first category whose keywords occur in the lowercased text."""
        normalized = text.lower()
        for category in self._categories:
            if category.matches(normalized):
                return category
        return None

    def respond(self, text: str) -> tuple[Category | None, str]:
        """Pick a reply and report which category produced it (None for the default pool)."""
        category = self.match_category(text)
        pool = category.responses if category else self._default_responses
        return category, self._rng.choice(pool)

    def generate(self, text: str) -> str:
        return self.respond(text)[1]
