# Error taxonomy shared by the core and the HTTP layer.
# InvalidInput and NotFound are client outcomes; StoreFailure is infrastructure.


class ChatServiceError(Exception):
    status_code = 500


class InvalidInput(ChatServiceError):
    status_code = 400


class NotFound(ChatServiceError):
    status_code = 404


class StoreFailure(ChatServiceError):
    """Redis was unreachable, timed out, or a payload could not be serialized.

    `operation` describes what was being attempted and is only ever logged;
    clients get a generic message.
    """

    status_code = 500

    def __init__(self, operation: str):
        super().__init__(operation)
        self.operation = operation
