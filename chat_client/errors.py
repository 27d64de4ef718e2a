"""
Client-side mirror of the server's chat error taxonomy, keyed by the
``code`` field of ``{"error", "code"}`` error bodies.
"""


class ChatClientError(Exception):
    code = 'error'

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.status_code = status_code


class InvalidParticipant(ChatClientError):
    code = 'invalid_participant'


class NotParticipant(ChatClientError):
    code = 'not_participant'


class EmptyMessage(ChatClientError):
    code = 'empty_message'


class NotFound(ChatClientError):
    code = 'not_found'


class TransientIOFailure(ChatClientError):
    code = 'transient_io_failure'


class NotAuthenticated(ChatClientError):
    code = 'not_authenticated'


class InvalidRequest(ChatClientError):
    code = 'invalid'


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (
        InvalidParticipant,
        NotParticipant,
        EmptyMessage,
        NotFound,
        TransientIOFailure,
        NotAuthenticated,
        InvalidRequest,
    )
}


def error_for(code, message=None, status_code=None) -> ChatClientError:
    return ERRORS_BY_CODE.get(code, ChatClientError)(message, status_code)
