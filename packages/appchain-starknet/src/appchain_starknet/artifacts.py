"""Contract artifact loading.

Artifacts are compiler output (Sierra contract classes and CASM compiled
classes) read as JSON documents. They are parsed and checked against a
minimal schema, never imported or executed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from appchain_starknet.errors import ArtifactLoadError
from appchain_starknet.observability import get_logger

# scarb: <pkg>_<Contract>.contract_class.json -> .compiled_contract_class.json
# starknet-compile: <name>.sierra.json -> <name>.casm.json
CASM_SUFFIXES: tuple[tuple[str, str], ...] = (
    (".contract_class.json", ".compiled_contract_class.json"),
    (".sierra.json", ".casm.json"),
)


class SierraDocument(BaseModel):
    """Schema of a Sierra contract class document.

    Only ``sierra_program`` is required. All other compiler fields are
    carried through untouched.
    """

    model_config = ConfigDict(extra="allow")

    sierra_program: list[Any] = Field(..., description="Sierra program felts")
    contract_class_version: str | None = Field(default=None)


class CasmDocument(BaseModel):
    """Schema of a CASM compiled class document."""

    model_config = ConfigDict(extra="allow")

    bytecode: list[Any] = Field(..., description="CASM bytecode")
    compiler_version: str | None = Field(default=None)


class ContractArtifact(BaseModel):
    """A loaded Sierra contract class.

    Attributes:
        path: Absolute path the artifact was read from.
        source: Raw JSON text, submitted as-is.
        document: Parsed document.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    source: str
    document: SierraDocument


class CompiledClassArtifact(BaseModel):
    """A loaded CASM compiled class."""

    model_config = ConfigDict(frozen=True)

    path: Path
    source: str
    document: CasmDocument


def resolve_artifact_path(path: str | Path, *, cwd: str | Path | None = None) -> Path:
    """Resolve an artifact path against a working directory.

    Args:
        path: Path as given on the command line. Absolute paths are kept.
        cwd: Base directory. Defaults to the process working directory.

    Returns:
        Absolute path.

    Raises:
        ArtifactLoadError: If path is empty.
    """
    if not str(path).strip():
        raise ArtifactLoadError(str(path), "path is empty")
    base = Path(cwd) if cwd is not None else Path.cwd()
    return (base / Path(path)).resolve()


def _read_json(path: Path, display: str) -> tuple[str, dict[str, Any]]:
    try:
        exists = path.exists()
        is_file = exists and path.is_file()
    except OSError as exc:
        # ENAMETOOLONG, EACCES on a parent directory, ...
        raise ArtifactLoadError(display, f"cannot access file ({exc.strerror or exc})") from exc
    if not exists:
        raise ArtifactLoadError(display, "file not found")
    if not is_file:
        raise ArtifactLoadError(display, "not a file")
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ArtifactLoadError(display, f"cannot read file ({exc})") from exc

    try:
        data = json.loads(source)
    except json.JSONDecodeError as exc:
        raise ArtifactLoadError(
            display, f"invalid JSON at line {exc.lineno}, column {exc.colno}"
        ) from exc

    if not isinstance(data, dict):
        raise ArtifactLoadError(display, "expected a JSON object")
    return source, data


def _first_error(err: PydanticValidationError) -> str:
    first = err.errors()[0]
    loc = ".".join(str(x) for x in first["loc"]) or "document"
    return f"{loc}: {first['msg']}"


def load_contract_class(path: str | Path, *, cwd: str | Path | None = None) -> ContractArtifact:
    """Load a Sierra contract class from disk.

    Args:
        path: Artifact path, relative to cwd unless absolute.
        cwd: Base directory. Defaults to the process working directory.

    Returns:
        The loaded ContractArtifact.

    Raises:
        ArtifactLoadError: If the file is missing, unreadable, not JSON,
            or not a Sierra contract class.

    Example:
        >>> artifact = load_contract_class("build/token.sierra.json")
        >>> artifact.path.name
        'token.sierra.json'
    """
    resolved = resolve_artifact_path(path, cwd=cwd)
    source, data = _read_json(resolved, str(path))
    try:
        document = SierraDocument.model_validate(data)
    except PydanticValidationError as exc:
        raise ArtifactLoadError(
            str(path), f"not a Sierra contract class ({_first_error(exc)})"
        ) from exc

    get_logger().info(
        "artifact_loaded",
        path=str(resolved),
        program_length=len(document.sierra_program),
    )
    return ContractArtifact(path=resolved, source=source, document=document)


def load_compiled_class(
    path: str | Path, *, cwd: str | Path | None = None
) -> CompiledClassArtifact:
    """Load a CASM compiled class from disk.

    Raises:
        ArtifactLoadError: If the file is missing, unreadable, not JSON,
            or has no bytecode.
    """
    resolved = resolve_artifact_path(path, cwd=cwd)
    source, data = _read_json(resolved, str(path))
    try:
        document = CasmDocument.model_validate(data)
    except PydanticValidationError as exc:
        raise ArtifactLoadError(
            str(path), f"not a compiled class ({_first_error(exc)})"
        ) from exc

    get_logger().info("compiled_class_loaded", path=str(resolved))
    return CompiledClassArtifact(path=resolved, source=source, document=document)


def find_compiled_class(sierra_path: Path) -> Path | None:
    """Find the CASM file the compiler wrote next to a Sierra file.

    Args:
        sierra_path: Absolute path of the Sierra artifact.

    Returns:
        Path of an existing sibling CASM file, or None.
    """
    name = sierra_path.name
    for sierra_suffix, casm_suffix in CASM_SUFFIXES:
        if name.endswith(sierra_suffix):
            candidate = sierra_path.with_name(name[: -len(sierra_suffix)] + casm_suffix)
            if candidate.is_file():
                return candidate
    return None
