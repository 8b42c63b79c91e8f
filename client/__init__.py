from client.chat_client import ChatClient, ChatServiceError, ChatSession
from client.retry import RetryPolicy, is_retryable_error, is_transient_error

__all__ = [
    "ChatClient",
    "ChatServiceError",
    "ChatSession",
    "RetryPolicy",
    "is_retryable_error",
    "is_transient_error",
]
