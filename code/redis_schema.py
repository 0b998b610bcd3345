# Redis key schema for per-application chat and message numbering.
# Presence keys double as scope existence markers; queue keys are shared with the worker.

def application_key(token: str) -> str:
    # Chat count for the application; presence means the application exists
    return f"application:{token}"

def last_chat_number_key(token: str) -> str:
    # INCR source for chat numbers
    return f"application:{token}:last_chat_number"

def chat_key(token: str, chat_number: int) -> str:
    # Message count for the chat; presence means the chat exists
    return f"application:{token}:chat:{chat_number}"

def last_message_number_key(token: str, chat_number: int) -> str:
    # INCR source for message numbers within one chat
    return f"application:{token}:chat:{chat_number}:last_message_number"

def queue_key(queue_name: str) -> str:
    # FIFO list consumed by the Sidekiq worker (RPUSH here, pop from head there)
    return f"queue:{queue_name}"
