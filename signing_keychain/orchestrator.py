"""Job orchestrator for provisioning a temporary signing keychain."""

import platform
from dataclasses import dataclass, field
from typing import List, Optional

import click

from . import actions
from .certificates import certificate_path, remove_certificate, write_certificate
from .config import KeychainConfig
from .keychain import KeychainManager
from .store.base import StoreToolError
from .store.security import SecurityTool


SUPPORTED_SYSTEM = "Darwin"


class UnsupportedPlatformError(RuntimeError):
    """The host cannot run the keychain tool."""
    pass


def ensure_supported_platform(system: Optional[str] = None) -> None:
    """
    Check that the host is macOS.

    Args:
        system: Platform name to check (defaults to platform.system())

    Raises:
        UnsupportedPlatformError: If the host is not macOS
    """
    system = system or platform.system()
    if system != SUPPORTED_SYSTEM:
        raise UnsupportedPlatformError(
            f"{system} not supported. This action is only supported on macOS"
        )


@dataclass
class JobResult:
    """Outcome of a keychain job."""

    succeeded: bool
    keychain_name: str
    certificates: List[str] = field(default_factory=list)
    error: Optional[BaseException] = None


class KeychainJob:
    """Runs the full create, import and cleanup sequence for one job."""

    def __init__(
        self,
        config: KeychainConfig,
        manager: Optional[KeychainManager] = None,
        system: Optional[str] = None,
    ):
        """
        Initialize job.

        Args:
            config: Validated job configuration
            manager: Keychain manager (defaults to one backed by `security`)
            system: Platform name override for the host check
        """
        self.config = config
        self.manager = manager or KeychainManager(
            SecurityTool(config.get_tool_config())
        )
        self.system = system
        self.certificate_path = certificate_path(config.temp_dir)
        self.keychain_started = False

    def _import_certificates(self) -> None:
        config = self.config
        certificates = config.signing_certificates
        total = len(certificates)

        with actions.group(f"Importing {total} certificates"):
            for index, blob in enumerate(certificates, start=1):
                actions.info(f"Importing certificate {index} of {total}")
                write_certificate(blob, self.certificate_path)
                self.manager.import_certificate(
                    str(self.certificate_path),
                    config.signing_certificate_passphrase,
                    config.keychain_name,
                    config.keychain_password,
                )
            actions.info(click.style("Certificates imported successfully", fg="green"))

    def _list_certificates(self) -> List[str]:
        name = self.config.keychain_name
        labels = self.manager.list_certificates(name)
        lines = [click.style(f"Certificates in {name}:", fg="yellow")]
        lines.extend(click.style(f"  * {label}", fg="yellow") for label in labels)
        actions.info("\n".join(lines))
        return labels

    def _cleanup(self) -> None:
        name = self.config.keychain_name

        if self.config.retain_keychain:
            actions.info(f"Keeping keychain {name} for inspection")
        else:
            actions.info(click.style("Cleaning up", fg="yellow"))
            # Nothing to delete if the host check failed before any keychain command
            if self.keychain_started:
                try:
                    self.manager.delete(name)
                except StoreToolError as e:
                    actions.warning(f"Failed to delete keychain {name}: {e}")

        # The decoded certificate never outlives the job, even when retained
        try:
            remove_certificate(self.certificate_path)
        except OSError as e:
            actions.warning(f"Failed to remove {self.certificate_path}: {e}")

    def run(self) -> JobResult:
        """
        Create the keychain, import every certificate and clean up.

        Failures are reported once through the runner; cleanup still runs
        and never replaces the original failure.

        Returns:
            JobResult describing the outcome
        """
        config = self.config
        result = JobResult(succeeded=False, keychain_name=config.keychain_name)

        actions.set_secret(config.keychain_password)
        actions.set_secret(config.signing_certificate_passphrase)

        try:
            ensure_supported_platform(self.system)

            self.keychain_started = True
            self.manager.create(
                config.keychain_name,
                config.keychain_password,
                config.keychain_timeout,
            )

            self._import_certificates()

            if actions.is_debug():
                result.certificates = self._list_certificates()

            result.succeeded = True
        except Exception as e:
            result.error = e
            actions.set_failed(str(e))
        finally:
            self._cleanup()

        return result
