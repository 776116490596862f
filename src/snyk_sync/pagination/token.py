from __future__ import annotations

import base64
import binascii

from pydantic import BaseModel, Field, ValidationError

from snyk_sync.configs.logging_config import get_logger
from snyk_sync.domain.entities.resource import ResourceId
from snyk_sync.errors import PageTokenError

log = get_logger(__name__)


class PageState(BaseModel):
    """One frame of the walk: which collection, and where we are in it."""

    resource_type_id: str
    resource_id: str = ""
    token: str = ""


class _SerializedBag(BaseModel):
    states: list[PageState] = Field(default_factory=list)
    current_state: PageState | None = None


class PageBag:
    """
    Stack of page states encoded into an opaque page token.

    All progress lives in the token; a bag decoded from the same token always
    asks for the same page.
    """

    def __init__(self) -> None:
        self._states: list[PageState] = []
        self._current: PageState | None = None

    @property
    def current(self) -> PageState | None:
        return self._current

    @property
    def states(self) -> list[PageState]:
        return list(self._states)

    def push(self, state: PageState) -> None:
        if self._current is not None:
            self._states.append(self._current)
        self._current = state

    def pop(self) -> PageState | None:
        popped = self._current
        if self._current is None:
            return None
        self._current = self._states.pop() if self._states else None
        return popped

    def next(self, page: str) -> None:
        if self._current is None:
            raise PageTokenError("no active page state")
        self._current = self._current.model_copy(update={"token": page})

    def page_token(self) -> str:
        if self._current is None:
            return ""
        return self._current.token

    def next_token(self, page: str) -> str:
        """
        Advance the current frame to `page` and serialize.

        An empty `page` means the current collection is exhausted: its frame
        is popped. Returns "" once no frames remain.
        """
        if not page:
            self.pop()
        else:
            self.next(page)
        return self.marshal()

    def marshal(self) -> str:
        if self._current is None:
            return ""
        raw = _SerializedBag(states=self._states, current_state=self._current).model_dump_json()
        return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")

    def unmarshal(self, token: str) -> None:
        if not token:
            self._states = []
            self._current = None
            return

        try:
            raw = base64.urlsafe_b64decode(token.encode("ascii"))
            data = _SerializedBag.model_validate_json(raw)
        except (binascii.Error, UnicodeError, ValueError, ValidationError) as exc:
            log.info("pagination.token.invalid error=%s", str(exc))
            raise PageTokenError("failed to decode page token") from exc

        self._states = list(data.states)
        self._current = data.current_state


def parse_page_token(token: str, resource_id: ResourceId) -> tuple[PageBag, str]:
    """
    Decode `token` and make sure a frame exists for `resource_id`.

    Returns the bag and the page cursor of the current frame ("" when the
    collection starts from the beginning).
    """
    bag = PageBag()
    bag.unmarshal(token)

    if bag.current is None:
        bag.push(
            PageState(
                resource_type_id=resource_id.resource_type,
                resource_id=resource_id.resource,
            )
        )

    return bag, bag.page_token()
