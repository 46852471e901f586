from rest_framework.exceptions import ValidationError

from shared.domain.errors import Conflict, Forbidden, InsufficientCredits, NotFound, TooEarly
from shared.infrastructure.exceptions import domain_exception_handler


def test_domain_errors_map_to_status_and_code():
    cases = [
        (NotFound(), 404, "not_found"),
        (Forbidden(), 403, "forbidden"),
        (Conflict(), 409, "conflict"),
        (TooEarly(), 400, "too_early"),
    ]
    for exc, status_code, code in cases:
        response = domain_exception_handler(exc, {})
        assert response.status_code == status_code
        assert response.data["code"] == code
        assert response.data["detail"] == exc.message


def test_context_is_included_in_the_body():
    exc = InsufficientCredits("Not enough", required=30, available=10)
    response = domain_exception_handler(exc, {})
    assert response.data == {
        "detail": "Not enough",
        "code": "insufficient_credits",
        "required": 30,
        "available": 10,
    }


def test_other_exceptions_fall_back_to_drf():
    response = domain_exception_handler(ValidationError({"field": ["bad"]}), {})
    assert response.status_code == 400
    assert response.data == {"field": ["bad"]}
