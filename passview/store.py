"""
Access to a pass(1)-compatible password store.

LEGAL NOTICE:
Decryption and encryption are delegated to the user's gpg installation. Secrets
are decrypted only into memory and written back only in encrypted form.
"""

import os
import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from . import config
from .errors import SourceNotFound, StoreAccessFailure

logger = logging.getLogger(__name__)


class SecretSource:
    """A resolved, decrypted view of one secret file."""

    identifier: str

    def read(self) -> Optional[str]:
        """Return the decrypted content, or None if the source has gone away."""
        raise NotImplementedError

    def close(self) -> None:
        """Release the view so the decrypted content is no longer rendered or held."""
        raise NotImplementedError


@dataclass
class LoadedSecret(SecretSource):
    """Decrypted content held in memory only until close()."""
    identifier: str
    content: Optional[str]

    def read(self) -> Optional[str]:
        return self.content

    def close(self) -> None:
        self.content = None

    def __repr__(self):
        return f"LoadedSecret(identifier={self.identifier!r})"


class PasswordStore:
    """Enumerates, decrypts and encrypts secrets under a store directory."""

    def __init__(self, root: Optional[str] = None, gpg_binary: str = config.GPG_BINARY):
        """
        Args:
            root: Store directory. Defaults to PASSWORD_STORE_DIR or ~/.password-store
            gpg_binary: gpg executable to run
        """
        self.root = os.path.abspath(root or config.PASSWORD_STORE_DIR)
        self.gpg_binary = gpg_binary

    def list_secrets(self) -> List[str]:
        """
        Return every secret identifier in the store, sorted.

        Raises:
            StoreAccessFailure: If the store directory is missing or unreadable.
        """
        if not os.path.isdir(self.root):
            raise StoreAccessFailure(f"Password store not found: {self.root}")

        def on_error(error: OSError):
            raise StoreAccessFailure(f"Cannot read password store: {error}") from error

        identifiers = []
        for dirpath, dirnames, filenames in os.walk(self.root, onerror=on_error):
            dirnames[:] = [d for d in dirnames if not d.startswith('.')]
            for filename in filenames:
                if not filename.endswith(config.SECRET_FILE_EXTENSION):
                    continue
                relative = os.path.relpath(os.path.join(dirpath, filename), self.root)
                identifier = relative[:-len(config.SECRET_FILE_EXTENSION)]
                identifiers.append(identifier.replace(os.sep, '/'))
        identifiers.sort()
        logger.debug(f"Found {len(identifiers)} secrets under {self.root}")
        return identifiers

    def path_for(self, identifier: str) -> str:
        """Absolute path of the encrypted file for an identifier."""
        path = os.path.normpath(
            os.path.join(self.root, identifier.replace('/', os.sep) + config.SECRET_FILE_EXTENSION)
        )
        if os.path.commonpath([self.root, path]) != self.root:
            raise SourceNotFound(identifier)
        return path

    def read_secret(self, identifier: str) -> str:
        """
        Decrypt one secret.

        Raises:
            SourceNotFound: If no file exists for the identifier.
            StoreAccessFailure: If gpg is missing or fails to decrypt.
        """
        path = self.path_for(identifier)
        if not os.path.isfile(path):
            raise SourceNotFound(identifier)
        result = self._run_gpg(["--quiet", "--yes", "--decrypt", path])
        logger.info(f"Decrypted secret {identifier}")
        return result.stdout

    def write_secret(self, identifier: str, content: str) -> None:
        """
        Encrypt content to the recipients of the nearest .gpg-id and replace the file.

        Raises:
            StoreAccessFailure: If no recipients are configured or gpg fails.
        """
        path = self.path_for(identifier)
        recipients = self.recipients_for(path)
        if not recipients:
            raise StoreAccessFailure(f"No {config.GPG_ID_FILE} found for {identifier}")

        os.makedirs(os.path.dirname(path), exist_ok=True)
        tmp_path = path + ".tmp"
        args = ["--quiet", "--yes", "--batch", "--encrypt", "--output", tmp_path]
        for recipient in recipients:
            args.extend(["--recipient", recipient])
        try:
            self._run_gpg(args, input_text=content)
            os.replace(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        logger.info(f"Encrypted secret {identifier} for {len(recipients)} recipient(s)")

    def recipients_for(self, path: str) -> List[str]:
        """Read the recipients from the .gpg-id closest to path, walking up to the store root."""
        directory = os.path.dirname(path)
        while True:
            gpg_id = os.path.join(directory, config.GPG_ID_FILE)
            if os.path.isfile(gpg_id):
                with open(gpg_id, 'r', encoding='utf-8') as f:
                    return [line.strip() for line in f if line.strip() and not line.startswith('#')]
            if directory == self.root or not directory.startswith(self.root):
                return []
            directory = os.path.dirname(directory)

    def _run_gpg(self, args: List[str], input_text: Optional[str] = None) -> subprocess.CompletedProcess:
        try:
            result = subprocess.run(
                [self.gpg_binary] + args,
                input=input_text,
                capture_output=True,
                text=True,
                timeout=config.GPG_TIMEOUT_SECONDS,
            )
        except FileNotFoundError as e:
            raise StoreAccessFailure(f"gpg executable not found: {self.gpg_binary}") from e
        except subprocess.TimeoutExpired as e:
            raise StoreAccessFailure("gpg timed out") from e
        except OSError as e:
            raise StoreAccessFailure(f"Could not run gpg: {e}") from e

        if result.returncode != 0:
            message = (result.stderr or "").strip() or f"exit status {result.returncode}"
            raise StoreAccessFailure(f"gpg failed: {message}")
        return result
