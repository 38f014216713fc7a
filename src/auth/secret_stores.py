"""Concrete secret stores: OS keyring, private files, and process memory."""

from __future__ import annotations

import base64
import logging
import os
import platform
import tempfile
import threading
from pathlib import Path
from typing import Optional

import keyring
import keyring.errors

from .errors import CredentialStorageError


class KeyringSecretStore:
    """Secret store backed by the OS keychain through `keyring`."""

    def __init__(
        self,
        service_name: str = "pomodoro-calendar",
        logger: Optional[logging.Logger] = None,
    ):
        self._service_name = service_name
        self._logger = logger or logging.getLogger("auth.secrets")

    def put(self, key: str, value: bytes) -> None:
        encoded = base64.b64encode(value).decode("ascii")
        try:
            keyring.set_password(self._service_name, key, encoded)
        except keyring.errors.KeyringError as error:
            raise CredentialStorageError(f"Failed to write '{key}' to keyring: {error}") from error

    def get(self, key: str) -> Optional[bytes]:
        try:
            encoded = keyring.get_password(self._service_name, key)
        except keyring.errors.KeyringError as error:
            self._logger.warning("Failed to read '%s' from keyring: %s", key, error)
            return None
        if encoded is None:
            return None
        try:
            return base64.b64decode(encoded.encode("ascii"), validate=True)
        except ValueError:
            self._logger.warning("Keyring entry '%s' is not valid base64", key)
            return None

    def delete(self, key: str) -> None:
        try:
            keyring.delete_password(self._service_name, key)
        except keyring.errors.PasswordDeleteError:
            return
        except keyring.errors.KeyringError as error:
            self._logger.warning("Failed to delete '%s' from keyring: %s", key, error)


class FileSecretStore:
    """One private file per key inside a 0700 directory."""

    def __init__(
        self,
        directory: str | Path,
        logger: Optional[logging.Logger] = None,
    ):
        self._directory = Path(directory).expanduser()
        self._logger = logger or logging.getLogger("auth.secrets")

    def put(self, key: str, value: bytes) -> None:
        target = self._path_for(key)
        try:
            self._ensure_directory()
            fd, temp_name = tempfile.mkstemp(dir=str(self._directory), prefix=f".{key}.")
        except OSError as error:
            raise CredentialStorageError(f"Failed to prepare secret file {target}: {error}") from error
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(value)
            if platform.system() != "Windows":
                os.chmod(temp_name, 0o600)
            os.replace(temp_name, target)
        except OSError as error:
            Path(temp_name).unlink(missing_ok=True)
            raise CredentialStorageError(f"Failed to write secret file {target}: {error}") from error

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as error:
            self._logger.warning("Failed to read secret file %s: %s", path, error)
            return None

    def delete(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid secret key: {key!r}")
        return self._directory / key

    def _ensure_directory(self) -> None:
        if not self._directory.exists():
            self._directory.mkdir(parents=True, exist_ok=True)
            if platform.system() != "Windows":
                os.chmod(self._directory, 0o700)


class MemorySecretStore:
    """Process-local store; nothing survives a restart."""

    def __init__(self):
        self._values: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: bytes) -> None:
        with self._lock:
            self._values[key] = bytes(value)

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._values.get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)
