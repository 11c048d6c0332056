from typing import Callable, Dict, List, Optional, Union

from .base import ModelBackend
from .types import GenerationRequest

# A scripted reply is either the text to return, an exception to raise,
# or a callable producing one of those from the request.
StubReply = Union[str, BaseException, Callable[[GenerationRequest], str]]


class StubModelBackend(ModelBackend):
    """
    Deterministic fake model for testing and CI.

    Replies are scripted per API key. Keys without a script get a fixed
    stubbed response. Every call is recorded in ``calls`` (keys only, in
    order) so tests can assert which credentials were tried.
    """

    DEFAULT_OUTPUT = "This is a stubbed response."

    def __init__(self, replies: Optional[Dict[str, StubReply]] = None):
        self.replies: Dict[str, StubReply] = dict(replies or {})
        self.calls: List[str] = []

    def generate(self, request: GenerationRequest) -> str:
        self.calls.append(request.api_key)

        reply = self.replies.get(request.api_key, self.DEFAULT_OUTPUT)
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(request)
        return reply
