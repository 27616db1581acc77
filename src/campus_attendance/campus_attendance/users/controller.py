from __future__ import annotations

from flask import Flask

from ..common.http import json_body, ok
from ..common.validators import optional_text
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from .guards import current_user


def _parse_role(value) -> Role:
    text = optional_text(value, "Role") or Role.STUDENT.value
    try:
        return Role(text.lower())
    except ValueError:
        raise ValidationError("Invalid role")


def register(app: Flask, container: Container) -> None:
    prefix = app.config.get("API_PREFIX", "/api")
    guards = container.guards

    @app.route(f"{prefix}/auth/validate-teacher-id", methods=["POST"], endpoint="validate_teacher_id")
    def validate_teacher_id():
        body = json_body()
        data = container.auth_service.validate_teacher_identifier(body.get("teacher_id") or "")
        return ok(data, message="Valid Teacher ID")

    @app.route(f"{prefix}/auth/register", methods=["POST"], endpoint="register")
    def register_account():
        body = json_body()
        role = _parse_role(body.get("role"))

        if role == Role.TEACHER:
            user, token = container.auth_service.register_teacher(
                email=body.get("email") or "",
                password=body.get("password") or "",
                teacher_identifier=body.get("teacher_id") or "",
                department=body.get("department") or "",
            )
            message = "Teacher account registered successfully! You can now login with your Teacher ID."
        else:
            user, token = container.auth_service.register_student(
                display_name=body.get("name") or "",
                email=body.get("email") or "",
                password=body.get("password") or "",
                roll_number=body.get("roll_number") or "",
                department=body.get("department"),
            )
            message = "Student account created successfully!"

        return ok({"user": user.public_dict(), "token": token}, message=message, status=201)

    @app.route(f"{prefix}/auth/login", methods=["POST"], endpoint="login")
    def login():
        body = json_body()
        user, token = container.auth_service.login(
            login=body.get("login") or body.get("email") or body.get("teacher_id") or "",
            password=body.get("password") or "",
            role=_parse_role(body.get("role")),
        )
        return ok({"user": user.public_dict(), "token": token}, message="Login successful! Welcome back!")

    @app.route(f"{prefix}/auth/me", methods=["GET"], endpoint="me")
    @guards.login_required
    def me():
        user = container.profile_service.get_profile(current_user().user_id)
        return ok({"user": user.public_dict()})

    @app.route(f"{prefix}/auth/profile", methods=["PUT"], endpoint="update_profile")
    @guards.login_required
    def update_profile():
        body = json_body()
        user = container.profile_service.update_profile(
            current_user(),
            display_name=body.get("name"),
            email=body.get("email"),
            department=body.get("department"),
        )
        return ok({"user": user.public_dict()}, message="Profile updated successfully!")

    @app.route(f"{prefix}/auth/password", methods=["PUT"], endpoint="change_password")
    @guards.login_required
    def change_password():
        body = json_body()
        container.profile_service.change_password(
            current_user(),
            current_password=body.get("current_password") or "",
            new_password=body.get("new_password") or "",
        )
        return ok(message="Password changed successfully!")
