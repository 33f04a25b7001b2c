"""Pydantic models for request/response envelopes.

Attributes are snake_case; the wire form (``to_wire``/``from_wire``) uses the
camelCase layout so envelopes can be serialized unchanged::

    {data, header: {success, message, requestId, apiKey},
     userInfo: {requesterId, remoteId | replierId}}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EnvelopeModel(BaseModel):
    """Base for envelope parts: accepts field names or wire aliases."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class EnvelopeHeader(EnvelopeModel):
    """Correlation header shared by requests and responses."""

    success: bool = True
    message: str = ""
    request_id: str = Field(alias="requestId")
    api_key: str = Field(alias="apiKey")


class RequestUserInfo(EnvelopeModel):
    """Who asked and who was asked."""

    requester_id: str = Field(alias="requesterId")
    remote_id: str = Field(alias="remoteId")


class ResponseUserInfo(EnvelopeModel):
    """Who asked and who answered."""

    requester_id: str = Field(alias="requesterId")
    replier_id: str = Field(alias="replierId")


class Envelope(EnvelopeModel):
    """Fields common to both envelope kinds."""

    data: Any = None
    header: EnvelopeHeader

    @property
    def request_id(self) -> str:
        return self.header.request_id

    @property
    def api_key(self) -> str:
        return self.header.api_key

    def to_wire(self) -> dict[str, Any]:
        """Dump using the camelCase wire field names."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_wire(cls, payload: Mapping[str, Any]):
        """Parse a wire-shaped mapping; unknown keys such as ``eventTag`` are ignored."""
        return cls.model_validate(dict(payload))


class RequestEnvelope(Envelope):
    """Outbound call: params plus requester and target identities."""

    user_info: RequestUserInfo = Field(alias="userInfo")


class ResponseEnvelope(Envelope):
    """Inbound answer: result plus requester and replier identities."""

    user_info: ResponseUserInfo = Field(alias="userInfo")
