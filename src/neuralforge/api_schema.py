from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class PayloadBase(BaseModel):
    model_config = ConfigDict(extra="forbid")


def _check_project_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise ValueError("project name is required")
    if name in {".", ".."} or "/" in name or "\\" in name:
        raise ValueError("project name must not contain path separators")
    return name


class ProjectNamePayload(PayloadBase):
    project_name: str

    @field_validator("project_name")
    @classmethod
    def validate_project_name(cls, value: str) -> str:
        return _check_project_name(value)


class SaveSelectedDirectoryPayload(ProjectNamePayload):
    directory_path: str = Field(min_length=1)


class CreateProjectBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    project_name: str = Field(alias="projectName")

    @field_validator("project_name")
    @classmethod
    def validate_project_name(cls, value: str) -> str:
        return _check_project_name(value)


def _format_validation_error(exc: ValidationError) -> str:
    parts: list[str] = []
    for item in exc.errors():
        loc = ".".join(str(piece) for piece in item.get("loc", [])) or "payload"
        msg = item.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}")
    details = "; ".join(parts) if parts else "invalid payload"
    return f"Invalid payload: {details}"


def parse_payload(model: type[BaseModel], payload: Any) -> tuple[BaseModel | None, str | None]:
    if not isinstance(payload, dict):
        return None, "Invalid payload: expected object."
    try:
        return model.model_validate(payload), None
    except ValidationError as exc:
        return None, _format_validation_error(exc)
