"""Shared pytest fixtures for all tests."""

import base64
from typing import Dict, List, Optional, Sequence

import pytest

from signing_keychain import actions
from signing_keychain.keychain import KeychainManager
from signing_keychain.store.base import StoreTool, StoreToolError


RUNNER_VARIABLES = [
    "GITHUB_OUTPUT",
    "RUNNER_DEBUG",
    "RUNNER_TEMP",
    "INPUT_KEYCHAIN-NAME",
    "INPUT_KEYCHAIN-PASSWORD",
    "INPUT_KEYCHAIN-TIMEOUT",
    "INPUT_SIGNING-CERTIFICATES",
    "INPUT_SIGNING-CERTIFICATE-PASSPHRASE",
    "SIGNING_KEYCHAIN_SECURITY_PATH",
    "SIGNING_KEYCHAIN_TIMEOUT",
    "SIGNING_KEYCHAIN_RETAIN",
    "SIGNING_KEYCHAIN_PASSWORD",
    "SIGNING_KEYCHAIN_CERT_PASSPHRASE",
]


class RecordingTool(StoreTool):
    """Store tool double that records every command it receives."""

    def __init__(
        self,
        fail_on: Optional[Dict[str, Exception]] = None,
        outputs: Optional[Dict[str, str]] = None,
    ):
        super().__init__()
        self.calls: List[List[str]] = []
        self.fail_on = fail_on or {}
        self.outputs = outputs or {}

    def _record(self, args: Sequence[str]) -> None:
        self.calls.append(list(args))
        failure = self.fail_on.get(args[0])
        if failure is not None:
            raise failure

    def run(self, args: Sequence[str]) -> None:
        self._record(args)

    def output(self, args: Sequence[str]) -> str:
        self._record(args)
        return self.outputs.get(args[0], "")

    @property
    def commands(self) -> List[str]:
        """Sub-commands in the order they were issued."""
        return [call[0] for call in self.calls]


@pytest.fixture(autouse=True)
def clean_runner_environment(monkeypatch):
    """Isolate each test from runner variables and registered secrets."""
    for name in RUNNER_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    actions.reset_secrets()

    yield

    actions.reset_secrets()


@pytest.fixture
def make_tool():
    """Factory for recording store tools."""
    return RecordingTool


@pytest.fixture
def recording_tool():
    """Recording store tool on which every command succeeds."""
    return RecordingTool()


@pytest.fixture
def manager(recording_tool):
    """Keychain manager backed by the recording tool."""
    return KeychainManager(recording_tool)


@pytest.fixture
def store_error():
    """Factory for store tool failures."""
    def _make(command="create-keychain", returncode=1, stderr="security: failed"):
        return StoreToolError(command, returncode, stderr)

    return _make


@pytest.fixture
def sample_certificate():
    """Base64 text of a fake .p12 file."""
    return base64.b64encode(b"\x30\x82\x0a\x00fake-pkcs12-data").decode()


@pytest.fixture
def sample_inventory():
    """Output of `security find-certificate -a` with three certificates."""
    return (
        'keychain: "/Users/runner/Library/Keychains/ci.keychain-db"\n'
        'version: 512\n'
        'class: 0x80001000\n'
        'attributes:\n'
        '    "alis"<blob>="Apple Development: Jane Doe (AB12CD34EF)"\n'
        '    "labl"<blob>="Apple Development: Jane Doe (AB12CD34EF)"\n'
        'keychain: "/Users/runner/Library/Keychains/ci.keychain-db"\n'
        'class: 0x80001000\n'
        'attributes:\n'
        '    "labl"<blob>="Developer ID Certification Authority"\n'
        'keychain: "/Users/runner/Library/Keychains/ci.keychain-db"\n'
        'class: 0x80001000\n'
        'attributes:\n'
        '    "labl"<blob>="Apple Distribution: Example Corp (ZX98YW76VU)"\n'
    )
