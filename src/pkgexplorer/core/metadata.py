"""Editable package metadata.

The record is mutated in place during edit sessions and never replaced.
Validation is advisory: `set_field` and `validate` maintain a per-field error
map that callers may inspect; nothing here raises on a bad value except an
unknown field name.

Manifest field mapping (JSON, v1):
  - id, version, title, description, summary, release_notes, copyright,
    language, project_url, license_url, icon_url: str
  - authors, owners, tags: [str]
  - require_license_acceptance: bool
  - dependencies: [{"id": str, "version": str}]
  - framework_assemblies: [{"assembly_name": str, "target_frameworks": [str]}]
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Any, Iterable, Mapping

from .errors import InvalidArgumentError

_ID_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.\-]*$")
_VERSION_RE = re.compile(r"^\d+(\.\d+){0,3}(-[0-9A-Za-z][0-9A-Za-z.\-]*)?$")
_MAX_ID_LENGTH = 100


def _norm_str(value: Any, *, where: str) -> str:
    """Normalize a required string: strip and reject empty/whitespace."""
    if not isinstance(value, str):
        raise ValueError(f"{where}: expected str, got {type(value).__name__}")
    s = value.strip()
    if not s:
        raise ValueError(f"{where}: must be a non-empty string")
    return s


def _str_list(value: Any, *, where: str) -> list[str]:
    """Accept a list of strings or a comma-separated string; drop blanks."""
    if value is None:
        return []
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ValueError(f"{where}: expected list of str, got {type(value).__name__}")
    out: list[str] = []
    for i, item in enumerate(items):
        if not isinstance(item, str):
            raise ValueError(f"{where}[{i}]: expected str, got {type(item).__name__}")
        s = item.strip()
        if s:
            out.append(s)
    return out


@dataclass(frozen=True)
class PackageDependency:
    id: str
    version_spec: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", _norm_str(self.id, where="dependency.id"))
        object.__setattr__(self, "version_spec", (self.version_spec or "").strip())

    def __str__(self) -> str:
        return f"{self.id} {self.version_spec}".strip()


@dataclass(frozen=True)
class FrameworkAssemblyReference:
    assembly_name: str
    target_frameworks: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "assembly_name", _norm_str(self.assembly_name, where="framework_assembly.assembly_name"))
        object.__setattr__(
            self,
            "target_frameworks",
            tuple(_str_list(list(self.target_frameworks), where="framework_assembly.target_frameworks")),
        )


def _check_url(value: str) -> str | None:
    if value and not value.startswith(("http://", "https://")):
        return "must be an http(s) URL"
    return None


def _validate_field(name: str, value: Any) -> str | None:
    """Return an error message for one field, or None when valid."""
    if name == "id":
        if not value:
            return "id is required"
        if len(value) > _MAX_ID_LENGTH:
            return f"id must be at most {_MAX_ID_LENGTH} characters"
        if not _ID_RE.match(value):
            return "id may contain only letters, digits, '.', '-' and '_'"
    elif name == "version":
        if not value:
            return "version is required"
        if not _VERSION_RE.match(value):
            return f"'{value}' is not a valid version"
    elif name == "authors":
        if not value:
            return "at least one author is required"
    elif name == "description":
        if not value:
            return "description is required"
    elif name in ("project_url", "license_url", "icon_url"):
        return _check_url(value)
    return None


def _object_list(value: Any, *, where: str) -> list[Any]:
    """Accept a list of entries or a comma-separated string of entries."""
    if value is None:
        return []
    if isinstance(value, str):
        return _str_list(value, where=where)
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{where}: expected a list, got {type(value).__name__}")
    return list(value)


def _coerce_field(name: str, value: Any) -> Any:
    if name in ("authors", "owners", "tags"):
        return _str_list(value, where=name)
    if name == "require_license_acceptance":
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if name == "dependencies":
        return [
            d if isinstance(d, PackageDependency) else _dependency_from_obj(d) for d in _object_list(value, where=name)
        ]
    if name == "framework_assemblies":
        return [
            a if isinstance(a, FrameworkAssemblyReference) else _assembly_from_obj(a)
            for a in _object_list(value, where=name)
        ]
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{name}: expected str, got {type(value).__name__}")
    return value.strip()


def _dependency_from_obj(obj: Any) -> PackageDependency:
    if isinstance(obj, str):
        dep_id, _, spec = obj.strip().partition(" ")
        return PackageDependency(dep_id, spec)
    if not isinstance(obj, Mapping):
        raise ValueError(f"dependencies[*]: expected object, got {type(obj).__name__}")
    return PackageDependency(obj.get("id"), obj.get("version") or "")


def _assembly_from_obj(obj: Any) -> FrameworkAssemblyReference:
    if isinstance(obj, str):
        return FrameworkAssemblyReference(obj)
    if not isinstance(obj, Mapping):
        raise ValueError(f"framework_assemblies[*]: expected object, got {type(obj).__name__}")
    return FrameworkAssemblyReference(obj.get("assembly_name"), tuple(obj.get("target_frameworks") or ()))


@dataclass(eq=False)
class EditablePackageMetadata:
    id: str = ""
    version: str = ""
    title: str = ""
    authors: list[str] = field(default_factory=list)
    owners: list[str] = field(default_factory=list)
    description: str = ""
    summary: str = ""
    release_notes: str = ""
    copyright: str = ""
    language: str = ""
    tags: list[str] = field(default_factory=list)
    project_url: str = ""
    license_url: str = ""
    icon_url: str = ""
    require_license_acceptance: bool = False
    dependencies: list[PackageDependency] = field(default_factory=list)
    framework_assemblies: list[FrameworkAssemblyReference] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._errors: dict[str, str] = {}
        for name in self.field_names():
            object.__setattr__(self, name, _coerce_field(name, getattr(self, name)))

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    # ---- errors ----

    @property
    def errors(self) -> dict[str, str]:
        return dict(self._errors)

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    def error_for(self, name: str) -> str | None:
        return self._errors.get(name)

    def reset_errors(self) -> None:
        """Clear the advisory error set; field values are left untouched."""
        self._errors.clear()

    def validate(self) -> dict[str, str]:
        self._errors.clear()
        for name in self.field_names():
            msg = _validate_field(name, getattr(self, name))
            if msg:
                self._errors[name] = msg
        return self.errors

    # ---- mutation ----

    def set_field(self, name: str, value: Any) -> str | None:
        """Assign one field and revalidate it. Returns the field's error message, if any."""
        if name not in self.field_names():
            raise InvalidArgumentError(f"unknown metadata field: {name!r}")
        try:
            coerced = _coerce_field(name, value)
        except ValueError as e:
            self._errors[name] = str(e)
            return self._errors[name]
        setattr(self, name, coerced)
        msg = _validate_field(name, coerced)
        if msg:
            self._errors[name] = msg
        else:
            self._errors.pop(name, None)
        return msg

    # ---- manifest mapping ----

    def to_manifest_fields(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for name in self.field_names():
            value = getattr(self, name)
            if name == "dependencies":
                value = [{"id": d.id, "version": d.version_spec} for d in value]
            elif name == "framework_assemblies":
                value = [
                    {"assembly_name": a.assembly_name, "target_frameworks": list(a.target_frameworks)}
                    for a in value
                ]
            elif isinstance(value, list):
                value = list(value)
            out[name] = value
        return out

    @classmethod
    def from_manifest(cls, manifest: Mapping[str, Any]) -> "EditablePackageMetadata":
        if not isinstance(manifest, Mapping):
            raise ValueError(f"manifest: expected object, got {type(manifest).__name__}")
        known = {k: manifest[k] for k in cls.field_names() if k in manifest}
        return cls(**known)

    def __str__(self) -> str:
        return f"{self.id} {self.version}".strip()
