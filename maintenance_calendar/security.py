"""
Input validation and secure file handling.

Validates user supplied regions and file paths and writes output files
with explicit permissions.
"""

import os
import re
from pathlib import Path
from typing import Union

from .error_handler import ValidationError


class InputValidator:
    """
    Validation of command line and configuration input.
    """

    MAX_FILE_PATH_LENGTH = 4096

    # us-east-1, eu-central-2, us-gov-west-1, cn-north-1, ...
    REGION_PATTERN = re.compile(r'^[a-z]{2}(-[a-z]+)+-\d$')

    @classmethod
    def validate_region(cls, region: str) -> str:
        """
        Validate an AWS region name.

        Args:
            region: Region name to validate

        Returns:
            str: Normalized region name

        Raises:
            ValidationError: If the region name is malformed
        """
        if not region or not isinstance(region, str):
            raise ValidationError("AWS region must be a non-empty string", field="region", value=region)

        normalized = region.strip().lower()
        if not cls.REGION_PATTERN.match(normalized):
            raise ValidationError(f"Invalid AWS region name: {region}", field="region", value=region)

        return normalized

    @classmethod
    def validate_file_path(cls, file_path: Union[str, Path],
                           allow_create: bool = True,
                           require_exists: bool = False) -> Path:
        """
        Validate a file path.

        Args:
            file_path: File path to validate
            allow_create: Whether missing parent directories may be created
            require_exists: Whether the file must already exist

        Returns:
            Path: Validated and resolved file path

        Raises:
            ValidationError: If file path is invalid or unusable
        """
        if not isinstance(file_path, (str, Path)):
            raise ValidationError(f"File path must be string or Path, got: {type(file_path)}")

        path_str = str(file_path)

        if not path_str.strip():
            raise ValidationError("File path must not be empty", field="file_path")

        if len(path_str) > cls.MAX_FILE_PATH_LENGTH:
            raise ValidationError(f"File path too long: {len(path_str)} > {cls.MAX_FILE_PATH_LENGTH}")

        # Null bytes truncate paths in the OS layer
        if '\x00' in path_str:
            raise ValidationError("File path contains null bytes")

        try:
            resolved_path = Path(path_str).expanduser().resolve()
        except (OSError, RuntimeError, ValueError) as e:
            raise ValidationError(f"Cannot resolve file path: {e}")

        if resolved_path.is_dir():
            raise ValidationError(f"File path is a directory: {resolved_path}")

        if require_exists and not resolved_path.exists():
            raise ValidationError(f"File does not exist: {resolved_path}")

        if allow_create and not resolved_path.parent.exists():
            try:
                resolved_path.parent.mkdir(parents=True, exist_ok=True)
            except (OSError, PermissionError) as e:
                raise ValidationError(f"Cannot create parent directory: {e}")

        if resolved_path.exists() and not os.access(resolved_path, os.R_OK):
            raise ValidationError(f"File not readable: {resolved_path}")

        return resolved_path


class SecureFileHandler:
    """
    File operations with explicit permissions.
    """

    SECURE_FILE_PERMISSIONS = 0o600  # rw-------
    READABLE_FILE_PERMISSIONS = 0o644  # rw-r--r--

    @classmethod
    def read_secure_file(cls, file_path: Path) -> str:
        """
        Read a UTF-8 text file.

        Args:
            file_path: Path to read

        Returns:
            str: File content
        """
        validated_path = InputValidator.validate_file_path(file_path, require_exists=True)

        try:
            # newline='' keeps CRLF line endings of ICS content intact
            with open(validated_path, encoding='utf-8', newline='') as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ValidationError(f"Cannot read file: {e}")

    @classmethod
    def write_secure_file(cls, file_path: Path, content: str,
                          permissions: int = SECURE_FILE_PERMISSIONS) -> None:
        """
        Write a UTF-8 text file, replacing any existing file.

        Args:
            file_path: Path to write
            content: File content
            permissions: File permissions
        """
        validated_path = InputValidator.validate_file_path(file_path, allow_create=True)
        temp_path = validated_path.with_suffix(validated_path.suffix + '.tmp')

        try:
            with open(temp_path, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
            temp_path.chmod(permissions)
            temp_path.replace(validated_path)

        except (OSError, PermissionError) as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ValidationError(f"Cannot write file: {e}")


def validate_region_input(region: str) -> str:
    """Convenience function for region validation."""
    return InputValidator.validate_region(region)


def validate_file_path_input(file_path: Union[str, Path], **kwargs) -> Path:
    """Convenience function for file path validation."""
    return InputValidator.validate_file_path(file_path, **kwargs)
