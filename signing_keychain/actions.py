"""GitHub Actions runner integration: workflow commands, inputs and outputs."""

import os
from contextlib import contextmanager
from typing import Iterator, List, Optional, Set

import click


MASK = "***"

# Process-wide registry of values that must never be echoed
_secrets: Set[str] = set()


def escape_data(text: str) -> str:
    """Escape a workflow command value so it stays on one line."""
    return text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def set_secret(value: Optional[str]) -> None:
    """
    Register a value as sensitive.

    The value is masked in everything this module echoes afterwards, and the
    runner is told to mask it in the job log as well. Each line of a
    multi-line value is registered on its own too.

    Args:
        value: Secret value (empty values are ignored)
    """
    if not value:
        return

    parts = [value]
    if "\n" in value or "\r" in value:
        parts.extend(line for line in value.splitlines() if line.strip())

    for part in parts:
        if part in _secrets:
            continue
        _secrets.add(part)
        click.echo(f"::add-mask::{escape_data(part)}")


def reset_secrets() -> None:
    """Forget all registered secrets."""
    _secrets.clear()


def mask(text: str) -> str:
    """
    Replace every registered secret in text with the mask.

    Args:
        text: Text that may contain secrets

    Returns:
        Text with secrets replaced by "***"
    """
    # Longest first so a secret containing another is masked whole
    for secret in sorted(_secrets, key=len, reverse=True):
        text = text.replace(secret, MASK)
    return text


def is_debug() -> bool:
    """Whether the runner has step debug logging enabled."""
    return os.getenv("RUNNER_DEBUG") == "1"


def debug(message: str) -> None:
    click.echo(f"::debug::{escape_data(mask(message))}")


def info(message: str) -> None:
    click.echo(mask(message))


def warning(message: str) -> None:
    click.echo(f"::warning::{escape_data(mask(message))}")


def error(message: str) -> None:
    click.echo(f"::error::{escape_data(mask(message))}", err=True)


def set_failed(message: str) -> None:
    """Report the single failure of the run."""
    error(message)


@contextmanager
def group(title: str) -> Iterator[None]:
    """Fold everything logged inside the block into a collapsible group."""
    click.echo(f"::group::{escape_data(mask(title))}")
    try:
        yield
    finally:
        click.echo("::endgroup::")


def set_output(name: str, value: str) -> None:
    """
    Publish a step output for downstream steps.

    Writes to the file named by GITHUB_OUTPUT when running on a runner,
    otherwise echoes "name=value".

    Args:
        name: Output name
        value: Output value
    """
    output_file = os.getenv("GITHUB_OUTPUT")
    if output_file:
        with open(output_file, "a", encoding="utf-8") as f:
            f.write(f"{name}={value}\n")
    else:
        click.echo(f"{name}={mask(value)}")


def _input_env_name(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(name: str, required: bool = False) -> str:
    """
    Read an action input from the environment.

    Args:
        name: Input name as declared in action.yml (e.g. "keychain-name")
        required: Raise if the input is missing or blank

    Returns:
        Input value with surrounding whitespace stripped

    Raises:
        ValueError: If a required input is not supplied
    """
    value = os.getenv(_input_env_name(name), "")
    if required and not value.strip():
        raise ValueError(f"Input required and not supplied: {name}")
    return value.strip()


def get_multiline_input(name: str, required: bool = False) -> List[str]:
    """Read a multiline action input, one entry per non-blank line."""
    value = get_input(name, required=required)
    return [line.strip() for line in value.splitlines() if line.strip()]
