from __future__ import annotations

from bigcommerce_api_client.core.errors import (
    BigCommerceApiError,
    BigCommerceMissingFieldError,
    BigCommerceRateLimitError,
    BigCommerceRequestError,
    BigCommerceScopeMismatchError,
    BigCommerceUrlTooLongError,
    extract_message,
)


def test_extract_message_prefers_message_over_title():
    assert extract_message({"message": "bad sku", "title": "Unprocessable"}) == "bad sku"


def test_extract_message_falls_back_to_title():
    assert extract_message({"status": 422, "title": "Unprocessable"}) == "Unprocessable"


def test_extract_message_reads_first_v2_error():
    assert extract_message([{"status": 400, "message": "first"}, {"message": "second"}]) == "first"


def test_extract_message_ignores_non_object_bodies():
    assert extract_message("plain text") is None
    assert extract_message([]) is None
    assert extract_message({"message": 12}) is None


def test_request_error_carries_diagnostics():
    err = BigCommerceRequestError(
        "boom",
        http_status=500,
        data={"data": "x", "headers": {}},
        cause="http",
    )
    assert str(err) == "boom"
    assert err.message == "boom"
    assert err.http_status == 500
    assert err.data == {"data": "x", "headers": {}}
    assert err.cause == "http"


def test_request_error_subclasses_share_base():
    assert issubclass(BigCommerceRateLimitError, BigCommerceRequestError)
    assert issubclass(BigCommerceUrlTooLongError, BigCommerceRequestError)
    assert issubclass(BigCommerceRequestError, BigCommerceApiError)


def test_missing_field_error_names_field():
    assert str(BigCommerceMissingFieldError("code")) == "No code found in query string"
    assert BigCommerceMissingFieldError("scope").field == "scope"


def test_scope_mismatch_names_both_scope_sets():
    err = BigCommerceScopeMismatchError("store_v2_orders", "store_v2_products store_v2_customers")
    assert str(err) == (
        "Scope mismatch: store_v2_orders; expected: store_v2_products store_v2_customers"
    )
