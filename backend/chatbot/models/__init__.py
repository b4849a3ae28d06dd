from chatbot.models.account import Account
from chatbot.models.chat import ChatMessage, MessageType

__all__ = ["Account", "ChatMessage", "MessageType"]
