"""Pydantic schemas for the auth endpoints."""

from __future__ import annotations

from pydantic import ConfigDict

from ast_portal.common.schema import BaseSchema


class LoginRequest(BaseSchema):
    model_config = ConfigDict(extra="ignore")

    password: str | None = None


class AuthResult(BaseSchema):
    success: bool
    message: str


class SessionStatus(BaseSchema):
    authenticated: bool
