"""
GreenLog Backend — Exception Hierarchy Tests
==============================================

What:  Error codes and the context dict each GreenLog error carries.
"""

import pytest

from greenlog.exceptions import (
    ConnectivityError,
    ConstraintViolationError,
    DatabaseError,
    GreenLogError,
    NotFoundError,
    ValidationError,
)


class TestContext:

    def test_validation_error_adds_field_to_its_own_context(self):
        shared = {"table": "soil"}

        error = ValidationError(message="Unknown column", field="columns", context=shared)

        assert error.context == {"table": "soil", "field": "columns"}
        assert shared == {"table": "soil"}

    def test_not_found_error_does_not_touch_callers_dict(self):
        shared = {"request": "rename"}

        first = NotFoundError(resource="user", resource_id="Ericson", context=shared)
        second = NotFoundError(resource="plant", context=shared)

        assert shared == {"request": "rename"}
        assert first.context["resource"] == "user"
        assert second.context == {"request": "rename", "resource": "plant"}

    def test_context_defaults_to_empty(self):
        assert GreenLogError().context == {}
        assert DatabaseError().context == {}


class TestHierarchy:

    @pytest.mark.parametrize(
        "error, code",
        [
            (ValidationError(), "validation_error"),
            (NotFoundError(), "not_found"),
            (DatabaseError(), "database_error"),
            (ConnectivityError(), "database_unavailable"),
            (ConstraintViolationError(), "constraint_violation"),
        ],
    )
    def test_error_codes(self, error, code):
        assert error.error_code == code

    def test_database_errors_share_a_base(self):
        assert isinstance(ConnectivityError(), DatabaseError)
        assert isinstance(ConstraintViolationError(unique=True), DatabaseError)
        assert ConstraintViolationError(unique=True).unique is True
