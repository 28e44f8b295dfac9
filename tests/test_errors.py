"""Tests for app.core.errors: the {message, details} envelope for every failure kind."""

import unittest

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel

from app.core.errors import (
    ConflictError,
    NotFoundError,
    register_exception_handlers,
    validation_details,
)


class _Payload(BaseModel):
    name: str
    count: int


def _build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/conflict")
    def conflict() -> dict:
        raise ConflictError("Email is already registered")

    @app.get("/missing")
    def missing() -> dict:
        raise NotFoundError("User not found")

    @app.get("/bookings/{booking_id}")
    def booking(booking_id: str) -> dict:
        raise HTTPException(status_code=404, detail="Booking not found")

    @app.get("/boom")
    def boom() -> dict:
        raise RuntimeError("database password is hunter2")

    @app.post("/payload")
    def payload(body: _Payload) -> dict:
        return body.model_dump()

    return app


class TestErrorEnvelope(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(_build_app(), raise_server_exceptions=False)

    def test_app_error_uses_its_status_and_message(self) -> None:
        response = self.client.get("/conflict")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json(), {"message": "Email is already registered"})

        response = self.client.get("/missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"message": "User not found"})

    def test_unexpected_error_is_generic_and_logged(self) -> None:
        with self.assertLogs("app.core.errors", level="ERROR") as logs:
            response = self.client.get("/boom")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"message": "Something went wrong"})
        self.assertNotIn("hunter2", response.text)
        record = logs.records[0]
        self.assertIn("GET /boom", record.getMessage())
        self.assertIsInstance(record.exc_info[1], RuntimeError)

    def test_validation_error_has_field_details(self) -> None:
        response = self.client.post("/payload", json={"count": "many"})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(set(body), {"message", "details"})
        self.assertEqual(body["message"], "Validation failed")
        self.assertEqual(set(body["details"]["field_errors"]), {"name", "count"})
        self.assertEqual(body["details"]["form_errors"], [])

    def test_malformed_json_body(self) -> None:
        response = self.client.post(
            "/payload",
            content=b'{"name": "x",',
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Invalid JSON format in request body"})

    def test_unknown_route_includes_path_and_query(self) -> None:
        response = self.client.get("/nope?x=1")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"message": "Route /nope?x=1 not found"})

    def test_route_raised_404_keeps_its_detail(self) -> None:
        response = self.client.get("/bookings/b-1")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"message": "Booking not found"})

    def test_method_not_allowed_keeps_status(self) -> None:
        response = self.client.delete("/conflict")
        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.json(), {"message": "Method Not Allowed"})


class TestValidationDetails(unittest.TestCase):
    def test_groups_messages_by_field_and_strips_location(self) -> None:
        details = validation_details(
            [
                {"loc": ("body", "email"), "msg": "not an email"},
                {"loc": ("body", "email"), "msg": "too long"},
                {"loc": ("query", "role"), "msg": "bad role"},
                {"loc": ("body", "items", 0, "name"), "msg": "required"},
                {"loc": ("body",), "msg": "Input should be an object"},
            ]
        )
        self.assertEqual(
            details.field_errors,
            {
                "email": ["not an email", "too long"],
                "role": ["bad role"],
                "items.0.name": ["required"],
            },
        )
        self.assertEqual(details.form_errors, ["Input should be an object"])


if __name__ == "__main__":
    unittest.main()
