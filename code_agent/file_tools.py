"""
Local file-system tools offered to the model: read_file, list_files, edit_file.

Every tool takes the decoded parameter mapping from the model and returns text.
Paths are used as given, relative to the process working directory.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List

from code_agent.errors import InvalidInput, NotFound, ToolIOError
from code_agent.registry import ToolDescriptor, ToolRegistry


READ_FILE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "path": {
            "type": "string",
            "description": "The relative path of a file in the working directory.",
        }
    },
    "required": ["path"],
    "additionalProperties": False,
}

LIST_FILES_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "path": {
            "type": "string",
            "description": "Optional relative path to list files from. Defaults to current directory if not provided.",
        }
    },
    "additionalProperties": False,
}

EDIT_FILE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "path": {
            "type": "string",
            "description": "The path to the file",
        },
        "old_str": {
            "type": "string",
            "description": "Text to search for - must match exactly and must only have one match exactly",
        },
        "new_str": {
            "type": "string",
            "description": "Text to replace old_str with",
        },
    },
    "required": ["path", "old_str", "new_str"],
    "additionalProperties": False,
}


def _decode_params(payload: Dict[str, Any], schema: Dict[str, Any]) -> Dict[str, str]:
    """
    Check a parameter mapping against a flat string-only schema.

    Parameters:
        payload: Decoded tool arguments.
        schema: One of the *_SCHEMA objects above.
    """
    properties = schema.get("properties", {})

    unknown = sorted(set(payload) - set(properties))
    if unknown:
        raise InvalidInput(f"invalid input format: unknown field(s) {', '.join(unknown)}")

    params = {}
    for key, value in payload.items():
        if not isinstance(value, str):
            raise InvalidInput(f"invalid input format: field '{key}' must be a string")
        params[key] = value
    return params


def read_file(payload: Dict[str, Any]) -> str:
    """Return the text of one file."""
    params = _decode_params(payload, READ_FILE_SCHEMA)
    file_path = params.get("path")
    if not file_path:
        raise InvalidInput("invalid input format: 'path' is required")

    path = Path(file_path)
    try:
        with path.open("r", encoding = "utf-8", errors = "replace", newline = "") as file:
            return file.read()
    except FileNotFoundError as exc:
        raise NotFound(f"failed to read file {file_path}: {exc}") from exc
    except OSError as exc:
        raise ToolIOError(f"failed to read file {file_path}: {exc}") from exc


def list_files(payload: Dict[str, Any]) -> str:
    """
    List every file and directory below a root as a JSON array.

    Entries are relative to the root, directories carry a trailing "/", and the
    root itself is left out. Order follows the filesystem walk. Symlinks are
    listed as plain entries and never followed.
    """
    params = _decode_params(payload, LIST_FILES_SCHEMA)
    root = params.get("path") or "."

    entries: List[str] = []
    try:
        _walk(root, "", entries)
    except OSError as exc:
        raise ToolIOError(f"failed to list files in {root}: {exc}") from exc

    return json.dumps(entries, ensure_ascii = False)


def _walk(directory: str, prefix: str, entries: List[str]) -> None:
    """Depth-first walk appending root-relative names; any OSError aborts."""
    with os.scandir(directory) as iterator:
        children = list(iterator)

    for entry in children:
        rel_path = prefix + entry.name
        if entry.is_dir(follow_symlinks = False):
            entries.append(rel_path + "/")
            _walk(entry.path, rel_path + "/", entries)
        else:
            entries.append(rel_path)


def edit_file(payload: Dict[str, Any]) -> str:
    """
    Replace text in a file, or create the file when old_str is empty.

    Every occurrence of old_str is replaced. The file is rewritten in place.

    Parameters:
        payload: Mapping with path, old_str and new_str.
    """
    params = _decode_params(payload, EDIT_FILE_SCHEMA)
    file_path = params.get("path", "")
    old_str = params.get("old_str", "")
    new_str = params.get("new_str", "")

    if not file_path or old_str == new_str:
        raise InvalidInput("invalid input parameters")

    path = Path(file_path)
    try:
        with path.open("r", encoding = "utf-8", newline = "") as file:
            old_content = file.read()
    except FileNotFoundError as exc:
        if old_str == "":
            return _create_new_file(path, new_str)
        raise NotFound(f"file not found: {file_path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ToolIOError(f"failed to read file {file_path}: {exc}") from exc

    new_content = old_content.replace(old_str, new_str)
    if new_content == old_content and old_str != "":
        raise InvalidInput("old_str not found in file")

    try:
        with path.open("w", encoding = "utf-8", newline = "") as file:
            file.write(new_content)
    except OSError as exc:
        raise ToolIOError(f"failed to write file {file_path}: {exc}") from exc

    return "OK"


def _create_new_file(path: Path, content: str) -> str:
    """Create a file, and any missing parent directories, holding content."""
    try:
        path.parent.mkdir(parents = True, exist_ok = True)
    except OSError as exc:
        raise ToolIOError(f"failed to create directory: {exc}") from exc

    try:
        with path.open("w", encoding = "utf-8", newline = "") as file:
            file.write(content)
    except OSError as exc:
        raise ToolIOError(f"failed to create file: {exc}") from exc

    return f"Successfully created file {path}"


READ_FILE_TOOL = ToolDescriptor(
    name = "read_file",
    description = (
        "Read the contents of a given relative file path. Use this when you want to see "
        "what's inside a file. Do not use this with directory names."
    ),
    input_schema = READ_FILE_SCHEMA,
    function = read_file,
)

LIST_FILES_TOOL = ToolDescriptor(
    name = "list_files",
    description = (
        "List files and directories at a given path. If no path is provided, "
        "lists files in the current directory."
    ),
    input_schema = LIST_FILES_SCHEMA,
    function = list_files,
)

EDIT_FILE_TOOL = ToolDescriptor(
    name = "edit_file",
    description = """Make edits to a text file.

Replaces 'old_str' with 'new_str' in the given file. 'old_str' and 'new_str' MUST be different from each other.

If the file specified with path doesn't exist, it will be created.
""",
    input_schema = EDIT_FILE_SCHEMA,
    function = edit_file,
)

DEFAULT_TOOLS = [READ_FILE_TOOL, LIST_FILES_TOOL, EDIT_FILE_TOOL]


def build_default_registry() -> ToolRegistry:
    """Registry holding the three file-system tools."""
    return ToolRegistry(DEFAULT_TOOLS)
