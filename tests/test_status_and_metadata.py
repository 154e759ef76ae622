import pytest
from pydantic import ValidationError

from rpc_gateway.codes import StatusCode
from rpc_gateway.metadata import MD, ServerMetadata, server_metadata_from_request, set_header, set_trailer
from rpc_gateway.schemas import AnyDetail, ErrorBody, ErrorInfo
from rpc_gateway.status import HasStatus, Status, StatusError, from_error


def test_from_error_with_status_error():
    status, ok = from_error(StatusError.of(StatusCode.PERMISSION_DENIED, "no"))
    assert ok is True
    assert status == Status(code=7, message="no")


def test_from_error_without_status():
    status, ok = from_error(ValueError("bad input"))
    assert ok is False
    assert status.code == StatusCode.UNKNOWN
    assert status.message == "bad input"


def test_from_error_none_is_ok():
    status, ok = from_error(None)
    assert ok is True
    assert status.code == StatusCode.OK


def test_status_error_has_status_capability():
    err = StatusError(Status.new(StatusCode.ABORTED, "retry"))
    assert isinstance(err, HasStatus)
    assert str(err) == "rpc error: code = 10 desc = retry"


def test_detail_payload_is_extra_fields():
    detail = AnyDetail(type_url="type.googleapis.com/google.rpc.RetryInfo", retryDelay="1s")
    status = Status.new(StatusCode.UNAVAILABLE, "later", [detail])
    assert status.details == (detail,)
    assert detail.payload == {"retryDelay": "1s"}
    assert detail.model_dump(by_alias=True) == {"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": "1s"}


def test_envelope_is_immutable_and_int32():
    info = ErrorInfo(code=5, status="NOT_FOUND")
    with pytest.raises(ValidationError):
        info.code = 6  # type: ignore[misc]
    with pytest.raises(ValidationError):
        ErrorInfo(code=2**31, status="INTERNAL")
    assert ErrorBody(error=info).model_dump(mode="json", by_alias=True) == {
        "error": {"code": 5, "status": "NOT_FOUND"}
    }


def test_metadata_lookup_and_queueing(make_request):
    request = make_request()
    assert server_metadata_from_request(request) is None

    set_header(request, "X-Trace", "t-1")
    set_trailer(request, "x-sum", "9")

    md = server_metadata_from_request(request)
    assert isinstance(md, ServerMetadata)
    assert ServerMetadata.for_request(request) is md
    assert list(md.header_md) == [("x-trace", "t-1")]
    assert list(md.trailer_md) == [("x-sum", "9")]


def test_md_keys_are_ordered_and_unique():
    md = MD()
    md.add("b", "1")
    md.add("a", "2")
    md.add("B", "3")
    assert md.keys() == ["b", "a"]
    assert list(md) == [("b", "1"), ("a", "2"), ("b", "3")]
