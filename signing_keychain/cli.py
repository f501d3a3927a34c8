"""Command-line interface for keychain operations."""

import click
import sys
from .config import KeychainConfig, load_config, ConfigError
from .keychain import KeychainManager
from .orchestrator import KeychainJob
from .store.base import StoreToolError
from .store.security import SecurityTool
from . import __version__


def _manager(security_path):
    return KeychainManager(SecurityTool({"security_path": security_path}))


security_path_option = click.option(
    "--security-path",
    default="security",
    envvar="SIGNING_KEYCHAIN_SECURITY_PATH",
    show_default=True,
    help="Path to the macOS security tool",
)


@click.group()
@click.version_option(version=__version__)
def main():
    """Temporary code-signing keychain tool."""
    pass


@main.command()
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Configuration file (YAML). Defaults to GitHub Actions inputs.",
)
@click.option("--keychain-name", help="Keychain name (.keychain is appended)")
@click.option(
    "--keychain-password",
    envvar="SIGNING_KEYCHAIN_PASSWORD",
    help="Keychain password",
)
@click.option("--keychain-timeout", type=int, help="Keychain lock timeout in seconds")
@click.option(
    "--retain/--no-retain",
    default=None,
    help="Keep the keychain after the job (defaults to runner debug mode)",
)
def run(config, keychain_name, keychain_password, keychain_timeout, retain):
    """Create a keychain, import the signing certificates and clean up."""
    overrides = {
        "keychain_name": keychain_name,
        "keychain_password": keychain_password,
        "keychain_timeout": keychain_timeout,
        "retain_keychain": retain,
    }

    try:
        if config:
            keychain_config = load_config(config)
        else:
            keychain_config = KeychainConfig.from_action_inputs(**overrides)
        # Command-line options win over the environment
        keychain_config = keychain_config.apply_environment_overrides().merge_with_cli_args(
            **overrides
        )
    except (FileNotFoundError, ConfigError) as e:
        click.echo(f"Config error: {e}", err=True)
        sys.exit(1)

    result = KeychainJob(keychain_config).run()
    if not result.succeeded:
        sys.exit(1)


@main.command()
@click.argument("name")
@click.option(
    "--password",
    envvar="SIGNING_KEYCHAIN_PASSWORD",
    required=True,
    help="Keychain password",
)
@click.option("--timeout", type=click.IntRange(min=0), default=3600, show_default=True)
@security_path_option
def create(name, password, timeout, security_path):
    """Create, unlock and reveal a keychain."""
    try:
        _manager(security_path).create(name, password, timeout)
    except (StoreToolError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("name")
@security_path_option
def delete(name, security_path):
    """Delete a keychain."""
    try:
        _manager(security_path).delete(name)
    except StoreToolError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command("import-certificate")
@click.argument("certificate", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--passphrase",
    envvar="SIGNING_KEYCHAIN_CERT_PASSPHRASE",
    required=True,
    help="Passphrase of the .p12 file",
)
@click.option("--keychain", "name", required=True, help="Target keychain")
@click.option(
    "--password",
    envvar="SIGNING_KEYCHAIN_PASSWORD",
    required=True,
    help="Keychain password",
)
@security_path_option
def import_certificate(certificate, passphrase, name, password, security_path):
    """Import a PKCS#12 signing certificate into a keychain."""
    try:
        _manager(security_path).import_certificate(
            certificate, passphrase, name, password
        )
    except StoreToolError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command("list-certificates")
@click.argument("name")
@security_path_option
def list_certificates(name, security_path):
    """List signing certificates in a keychain."""
    try:
        labels = _manager(security_path).list_certificates(name)
    except StoreToolError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for label in labels:
        click.echo(label)


if __name__ == "__main__":
    main()
