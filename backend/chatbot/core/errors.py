"""Error taxonomy for the chat core. Request validation lives in the API schemas."""


class ChatbotError(Exception):
    pass


class PersistenceError(ChatbotError):
    """The message store could not read or write. Never retried by the core."""
