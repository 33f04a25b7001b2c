"""Tests for request/response envelope models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from eventfetch.core.fetch.envelopes import (
    EnvelopeHeader,
    RequestEnvelope,
    RequestUserInfo,
    ResponseEnvelope,
)

WIRE_REQUEST = {
    "data": {"token": "t"},
    "header": {"success": True, "message": "", "requestId": "o-abc", "apiKey": "Auth"},
    "userInfo": {"requesterId": "u-1", "remoteId": "u-2"},
}


class TestEnvelopeWireShape:
    """Tests for the camelCase wire form."""

    def test_request_to_wire(self):
        """Test that snake_case attributes dump to the wire field names."""
        request = RequestEnvelope(
            data={"token": "t"},
            header=EnvelopeHeader(request_id="o-abc", api_key="Auth"),
            user_info=RequestUserInfo(requester_id="u-1", remote_id="u-2"),
        )
        assert request.to_wire() == WIRE_REQUEST

    def test_request_from_wire(self):
        """Test that wire mappings parse, ignoring eventTag."""
        request = RequestEnvelope.from_wire({**WIRE_REQUEST, "eventTag": "EventFetch:Fetch:Request"})

        assert request.request_id == "o-abc"
        assert request.api_key == "Auth"
        assert request.user_info.remote_id == "u-2"
        assert request.data == {"token": "t"}

    def test_response_from_wire(self):
        """Test that responses carry replierId."""
        response = ResponseEnvelope.from_wire(
            {
                "data": 1,
                "header": {"requestId": "o-1", "apiKey": "X"},
                "userInfo": {"requesterId": "a", "replierId": "b"},
            }
        )

        assert response.user_info.replier_id == "b"
        assert response.header.success is True
        assert response.header.message == ""

    def test_response_requires_replier(self):
        """Test that a request-shaped user info is not a valid response."""
        with pytest.raises(ValidationError):
            ResponseEnvelope.from_wire(WIRE_REQUEST)

    def test_envelopes_are_frozen(self):
        """Test that envelope fields cannot be reassigned."""
        request = RequestEnvelope.from_wire(WIRE_REQUEST)
        with pytest.raises(ValidationError):
            request.data = "changed"
