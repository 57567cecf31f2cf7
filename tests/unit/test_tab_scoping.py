"""Unit tests for tab scoping of batch-update requests."""

import pytest

from docs_gateway.gateway.tab_scoping import (
    TAB_SCOPE_BY_REQUEST,
    TabScope,
    add_tab_scope,
    scope_for,
)


@pytest.mark.unit
class TestScopeFor:
    def test_should_classify_criteria_requests(self) -> None:
        for name in ("replaceNamedRangeContent", "replaceAllText", "deleteNamedRange"):
            assert scope_for(name) is TabScope.CRITERIA

    def test_should_classify_direct_requests(self) -> None:
        for name in (
            "deletePositionedObject",
            "replaceImage",
            "updateDocumentStyle",
            "deleteHeader",
            "deleteFooter",
            "location",
            "range",
        ):
            assert scope_for(name) is TabScope.DIRECT

    def test_should_default_to_none(self) -> None:
        assert scope_for("insertText") is TabScope.NONE
        assert "insertText" not in TAB_SCOPE_BY_REQUEST


@pytest.mark.unit
class TestAddTabScope:
    """Tests for add_tab_scope()."""

    def test_should_wrap_criteria_requests(self) -> None:
        request = {"replaceAllText": {"containsText": {"text": "{Updating}"}, "replaceText": "x"}}

        add_tab_scope(request, "t.1")

        assert request["tabsCriteria"] == {"tabIds": ["t.1"]}
        assert "tabId" not in request

    def test_should_set_top_level_tab_id_on_direct_requests(self) -> None:
        request = {"deletePositionedObject": {"objectId": "kix.1"}}

        add_tab_scope(request, "t.1")

        assert request["tabId"] == "t.1"
        assert "tabsCriteria" not in request

    def test_should_inject_into_nested_location(self) -> None:
        request = {"insertText": {"location": {"index": 5}, "text": "hello"}}

        add_tab_scope(request, "t.2")

        assert request["insertText"]["location"] == {"index": 5, "tabId": "t.2"}
        assert "tabId" not in request
        assert "tabsCriteria" not in request

    def test_should_inject_into_nested_range(self) -> None:
        request = {"updateTextStyle": {"range": {"startIndex": 1, "endIndex": 4}, "fields": "*"}}

        add_tab_scope(request, "t.2")

        assert request["updateTextStyle"]["range"]["tabId"] == "t.2"

    def test_should_inject_nested_fields_for_criteria_requests(self) -> None:
        request = {"replaceNamedRangeContent": {"text": "x", "range": {"startIndex": 1}}}

        add_tab_scope(request, "t.3")

        assert request["tabsCriteria"] == {"tabIds": ["t.3"]}
        assert request["replaceNamedRangeContent"]["range"]["tabId"] == "t.3"

    def test_should_inject_nested_fields_for_direct_requests(self) -> None:
        request = {"updateDocumentStyle": {"documentStyle": {}, "range": {"startIndex": 1}}}

        add_tab_scope(request, "t.3")

        assert request["tabId"] == "t.3"
        assert request["updateDocumentStyle"]["range"]["tabId"] == "t.3"

    def test_should_leave_other_requests_alone(self) -> None:
        request = {"createNamedRange": {"name": "Z_F001", "range": None}}

        add_tab_scope(request, "t.1")

        assert request == {"createNamedRange": {"name": "Z_F001", "range": None}}

    def test_should_return_same_object(self) -> None:
        request = {"deleteHeader": {"headerId": "h.1"}}

        assert add_tab_scope(request, "t.1") is request

    def test_should_reject_empty_request(self) -> None:
        with pytest.raises(ValueError):
            add_tab_scope({}, "t.1")
