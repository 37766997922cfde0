"""
Native file system tools.

Read tools only validate and read. Write tools validate, ask the
confirmation gate, and only then touch the disk. Every failure is returned
to the model as text starting with ERROR: or REJECTED:.
"""

import logging
import os
from typing import Any

from agentgate.confirmation import ConfirmationHandler, ConfirmationOutcome, OperationRequest
from agentgate.filesystem import READ_ONLY_MESSAGE, FileSystemProvider
from agentgate.tools import BaseTool
from agentgate.validation import validate_content, validate_path

logger = logging.getLogger(__name__)


def _path_schema(description: str) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": description},
        },
        "required": ["path"],
    }


def _write_schema(path_description: str, content_description: str) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": path_description},
            "content": {"type": "string", "description": content_description},
        },
        "required": ["path", "content"],
    }


def _summary(content: str) -> str:
    lines = content.count("\n") + 1
    return f"Lines: {lines} | Characters: {len(content)}"


def denied_result(outcome: ConfirmationOutcome, rejected_message: str) -> str:
    """Text for a confirmation outcome that is not APPROVED."""
    if outcome.is_error:
        return f"ERROR: {outcome.message}"
    return f"REJECTED: {rejected_message}"


class ListDirectoryTool(BaseTool):
    name = "list__directory"
    description = (
        "Lists all files and directories in the specified path. "
        "Use this to explore project structure."
    )

    def __init__(self, file_system: FileSystemProvider) -> None:
        self.file_system = file_system

    def parameters_schema(self) -> dict[str, Any]:
        return _path_schema("Absolute path to the directory to list")

    def execute(self, arguments: dict[str, Any]) -> str:
        path = arguments.get("path")
        validation = validate_path(path)
        if not validation:
            return f"ERROR: {validation.error_message}"

        try:
            entries = self.file_system.list_directory(path)
        except OSError as e:
            return (
                f"ERROR: Failed to list directory '{path}': {e}\n\n"
                "Suggestion: Verify the path exists and you have permission to read it."
            )

        if not entries:
            return f"Contents of '{path}' (0 items):\n(empty directory)"

        listing = "\n".join(f"  - {os.path.basename(entry)}" for entry in entries)
        return f"Contents of '{path}' ({len(entries)} items):\n{listing}"


class ReadFileTool(BaseTool):
    name = "read__file"
    description = (
        "Reads the complete content of a file. "
        "Use this to understand existing code before making changes."
    )

    def __init__(self, file_system: FileSystemProvider) -> None:
        self.file_system = file_system

    def parameters_schema(self) -> dict[str, Any]:
        return _path_schema("Absolute path to the file to read")

    def execute(self, arguments: dict[str, Any]) -> str:
        path = arguments.get("path")
        validation = validate_path(path)
        if not validation:
            return f"ERROR: {validation.error_message}"

        try:
            content = self.file_system.read_file(path)
        except (OSError, UnicodeDecodeError) as e:
            return (
                f"ERROR: Failed to read file '{path}': {e}\n\n"
                "Suggestion: Verify the file exists and you have permission to read it."
            )

        return f"File: {path}\n{_summary(content)}\n\n```\n{content}\n```"


class CreateFileTool(BaseTool):
    name = "create__file"
    description = (
        "Creates a NEW file with the specified content. ONLY use for new files. "
        "Use edit__file for existing files."
    )

    def __init__(self, file_system: FileSystemProvider, confirmation: ConfirmationHandler) -> None:
        self.file_system = file_system
        self.confirmation = confirmation

    def parameters_schema(self) -> dict[str, Any]:
        return _write_schema("Absolute path for the new file", "Content to write to the file")

    def execute(self, arguments: dict[str, Any]) -> str:
        if not self.file_system.can_write:
            return f"ERROR: {READ_ONLY_MESSAGE}"

        path = arguments.get("path")
        content = arguments.get("content")
        for validation in (validate_path(path), validate_content(content)):
            if not validation:
                return f"ERROR: {validation.error_message}"

        overwrite = self.file_system.file_exists(path)
        outcome = self.confirmation.request_file_write_confirmation(
            OperationRequest.file_write(path, new_content=content, overwrite=overwrite)
        )
        if not outcome.is_approved:
            logger.info(f"File creation not approved for {path}: {outcome.type.value}")
            return denied_result(outcome, f"File creation cancelled by user for '{path}'")

        try:
            self.file_system.write_file(path, content)
        except OSError as e:
            return f"ERROR: Failed to create file '{path}': {e}"

        return f"SUCCESS: Created file '{path}'\n{_summary(content)}"


class EditFileTool(BaseTool):
    name = "edit__file"
    description = (
        "Edits an EXISTING file by replacing its content. ONLY use for existing files. "
        "Read the file first to understand current content."
    )

    def __init__(self, file_system: FileSystemProvider, confirmation: ConfirmationHandler) -> None:
        self.file_system = file_system
        self.confirmation = confirmation

    def parameters_schema(self) -> dict[str, Any]:
        return _write_schema(
            "Absolute path to the existing file",
            "New content to replace the existing content",
        )

    def execute(self, arguments: dict[str, Any]) -> str:
        if not self.file_system.can_write:
            return f"ERROR: {READ_ONLY_MESSAGE}"

        path = arguments.get("path")
        content = arguments.get("content")
        for validation in (validate_path(path), validate_content(content)):
            if not validation:
                return f"ERROR: {validation.error_message}"

        try:
            old_content = self.file_system.read_file(path)
        except (OSError, UnicodeDecodeError):
            return (
                f"ERROR: File '{path}' not found. Use create__file for new files.\n"
                "Suggestion: First use read__file to verify the file exists."
            )

        outcome = self.confirmation.request_file_write_confirmation(
            OperationRequest.file_write(
                path,
                new_content=content,
                old_content=old_content,
                overwrite=True,
            )
        )
        if not outcome.is_approved:
            logger.info(f"File edit not approved for {path}: {outcome.type.value}")
            return denied_result(outcome, f"File edit cancelled by user for '{path}'")

        try:
            self.file_system.write_file(path, content)
        except OSError as e:
            return f"ERROR: Failed to edit file '{path}': {e}"

        return f"SUCCESS: Edited file '{path}'\n{_summary(content)}"
