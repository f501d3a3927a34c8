"""Temporary keychain lifecycle: create, import, list and delete."""

import re
from typing import Callable, List, Optional

from . import actions
from .store.base import StoreTool, StoreToolError


# Keychain that stays in the user search list next to the temporary one
LOGIN_KEYCHAIN = "login.keychain"

# Tool trusted to use imported identities without prompting
CODESIGN_PATH = "/usr/bin/codesign"

# Partition list granting the signing toolchain access to imported keys
SIGNING_PARTITIONS = "apple-tool:,apple:,codesign:"

# Marker words in developer, distribution and device signing identities
LABEL_MARKERS = ("Development", "Distribution", "Mac", "iPhone")

LABEL_PATTERN = re.compile(
    r'"labl"<blob>="([^"]*(?:'
    + "|".join(LABEL_MARKERS)
    + r')[^"]*)"'
)

OUTPUT_KEYCHAIN_NAME = "keychain-name"


def parse_certificate_labels(inventory: str) -> List[str]:
    """
    Extract signing certificate labels from `security find-certificate` output.

    Args:
        inventory: Raw inventory text

    Returns:
        Matching labels in the order they appear (empty if none match)
    """
    if not inventory:
        return []
    return LABEL_PATTERN.findall(inventory)


class KeychainManager:
    """Drives a temporary keychain through its lifecycle."""

    def __init__(self, tool: StoreTool):
        """
        Initialize manager.

        Args:
            tool: Store tool every keychain command is sent through
        """
        self.tool = tool

    def best_effort(
        self, description: str, func: Callable[..., None], *args
    ) -> Optional[StoreToolError]:
        """
        Run a step whose failure is expected and harmless.

        Returns:
            The swallowed failure, or None if the step succeeded
        """
        try:
            func(*args)
        except StoreToolError as e:
            actions.debug(f"{description}: {e}")
            return e
        return None

    def create(self, name: str, password: str, timeout: int) -> None:
        """
        Create, unlock and configure a keychain and make it visible.

        Any keychain already registered under the same name is deleted first.

        Args:
            name: Keychain name (e.g. "signing.keychain")
            password: Keychain password
            timeout: Idle seconds before the keychain locks again

        Raises:
            ValueError: If name is empty or timeout is negative
            StoreToolError: If any step fails; later steps are not run
        """
        actions.set_secret(password)

        if not name:
            raise ValueError("Keychain name must not be empty")
        if timeout < 0:
            raise ValueError(f"Keychain timeout must be >= 0, got {timeout}")

        self.best_effort(f"Keychain {name} does not exist", self.delete, name)

        actions.debug(f"Creating keychain {name}")
        self.tool.run(["create-keychain", "-p", password, name])
        actions.info(f"Keychain {name} created")

        actions.debug(f"Unlocking keychain {name}")
        self.tool.run(["unlock-keychain", "-p", password, name])

        actions.debug(f"Setting keychain timeout to {timeout} seconds")
        self.tool.run(["set-keychain-settings", "-t", str(timeout), "-u", name])

        actions.debug(f"Revealing keychain {name} to the user")
        self.tool.run(["list-keychains", "-d", "user", "-s", LOGIN_KEYCHAIN, name])

        actions.set_output(OUTPUT_KEYCHAIN_NAME, name)

    def delete(self, name: str) -> None:
        """
        Delete a keychain.

        Raises:
            StoreToolError: If deletion fails, including when it does not exist
        """
        actions.debug(f"Deleting keychain {name}")
        self.tool.run(["delete-keychain", name])
        actions.info(f"Keychain {name} deleted")

    def import_certificate(
        self,
        certificate_path: str,
        passphrase: str,
        name: str,
        password: str,
    ) -> None:
        """
        Import a PKCS#12 signing identity and let codesign use its key.

        Args:
            certificate_path: Path of the .p12 file
            passphrase: Passphrase protecting the .p12 file
            name: Target keychain name
            password: Password of the target keychain

        Raises:
            StoreToolError: If the import or the partition list update fails
        """
        actions.set_secret(passphrase)
        actions.set_secret(password)

        actions.debug(f"Importing {certificate_path} into keychain {name}")
        self.tool.run([
            "import", str(certificate_path),
            "-P", passphrase,
            "-k", name,
            "-t", "cert",
            "-f", "pkcs12",
            "-T", CODESIGN_PATH,
            "-x",
        ])

        actions.debug("Setting key-partition-list")
        self.tool.run([
            "set-key-partition-list",
            "-S", SIGNING_PARTITIONS,
            "-s",
            "-k", password,
            name,
        ])

    def list_certificates(self, name: str) -> List[str]:
        """
        List signing certificate labels in a keychain.

        Returns:
            Labels of development, distribution and device certificates

        Raises:
            StoreToolError: If the inventory cannot be read
        """
        inventory = self.tool.output(["find-certificate", "-a", name])
        return parse_certificate_labels(inventory)
