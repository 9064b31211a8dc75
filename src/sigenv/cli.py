"""Command-line interface for sigenv.

Example:
    >>> # From terminal:
    >>> # sigenv --version
    >>> # sigenv keys generate --out signing_key.json --comment "release key"
    >>> # sigenv keys public signing_key.json --out public_key.json
    >>> # sigenv sign data.json --key signing_key.json --expiration 1735397970
    >>> # sigenv verify signature.json --public-key public_key.json
"""

import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from pydantic import ValidationError

from sigenv import __version__
from sigenv.crypto.builder import SignatureBuilder
from sigenv.crypto.keys import (
    SigningKey,
    load_public_key_from_file,
    load_signing_key_from_file,
    write_signing_key_file,
)
from sigenv.crypto.signature import Signature
from sigenv.errors import (
    EncodingFailedError,
    KeyExpirationError,
    SignatureBuilderError,
    SignatureError,
    TimestampError,
)

app = typer.Typer(help="sigenv: typed signed envelopes.")

keys_app = typer.Typer(help="Signing key generation and public key export.")
app.add_typer(keys_app, name="keys")

ENV_SIGNING_KEY_FILE = "SIGENV_SIGNING_KEY_FILE"


def _version_callback(value: bool) -> None:
    """Print the version and exit when requested."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


VERSION_OPTION = typer.Option(
    False,
    "--version",
    help="Show sigenv version and exit.",
    callback=_version_callback,
    is_eager=True,
)


@app.callback()
def cli(version: bool = VERSION_OPTION) -> None:
    """sigenv CLI entrypoint."""


def _read_json(path: Path, what: str) -> Any:
    if not path.exists():
        raise typer.BadParameter(f"{what} not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON in {what.lower()}: {exc}") from exc


def _write_or_echo(output: str, out: Optional[Path], what: str) -> None:
    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(output, encoding="utf-8")
        typer.echo(f"{what} written to {out}")
    else:
        typer.echo(output)


def _load_signing_key(path: Path) -> SigningKey[Any]:
    if not path.exists():
        raise typer.BadParameter(f"Key file not found: {path}")
    try:
        return load_signing_key_from_file(path)
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid signing key: {exc}") from exc


@keys_app.command("generate")
def keys_generate(
    out: Annotated[
        Path,
        typer.Option(..., "--out", "-o", help="Output path for the signing key JSON file."),
    ],
    comment: Annotated[
        Optional[str],
        typer.Option("--comment", "-c", help="Untrusted comment attached to the key."),
    ] = None,
    expires_at: Annotated[
        Optional[int],
        typer.Option("--expires-at", help="Key expiration as Unix seconds."),
    ] = None,
) -> None:
    """Write a new signing key to a JSON file (mode 0600)."""
    if out.exists() and out.is_dir():
        raise typer.BadParameter(f"Output path is a directory: {out}")
    key: SigningKey[str] = SigningKey[str].generate()
    if comment is not None:
        key = key.with_comment(comment)
    if expires_at is not None:
        try:
            key = key.with_expiration(expires_at)
        except (TimestampError, KeyExpirationError) as exc:
            raise typer.BadParameter(exc.message) from exc
    write_signing_key_file(key, out)
    typer.echo(f"Signing key {key.keynum} written to {out}")


@keys_app.command("public")
def keys_public(
    key_file: Annotated[Path, typer.Argument(help="Path to the signing key JSON file.")],
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Output path for the public key JSON (default: stdout)."),
    ] = None,
) -> None:
    """Derive the public key of a signing key."""
    public_key = _load_signing_key(key_file).public_key()
    _write_or_echo(public_key.model_dump_json(indent=2), out, "Public key")


@app.command("sign")
def sign(
    data_file: Annotated[Path, typer.Argument(help="Path to the JSON data to sign.")],
    key: Annotated[
        Path,
        typer.Option(
            ...,
            "--key",
            "-k",
            help="Path to the signing key JSON file.",
            envvar=ENV_SIGNING_KEY_FILE,
        ),
    ],
    timestamp: Annotated[
        Optional[int],
        typer.Option("--timestamp", help="Signing timestamp as Unix seconds (default: now)."),
    ] = None,
    expiration: Annotated[
        Optional[int],
        typer.Option("--expiration", help="Signature expiration as Unix seconds."),
    ] = None,
    comment: Annotated[
        Optional[str],
        typer.Option("--comment", "-c", help="Untrusted comment (not signed)."),
    ] = None,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Output path for the signature JSON (default: stdout)."),
    ] = None,
) -> None:
    """Sign JSON data; output the signature envelope as JSON."""
    data = _read_json(data_file, "Data file")
    signing_key = _load_signing_key(key)
    builder: SignatureBuilder[Any, str] = SignatureBuilder(data)
    try:
        if timestamp is not None:
            builder = builder.with_timestamp(timestamp)
        if expiration is not None:
            builder = builder.with_expiration(expiration)
    except TimestampError as exc:
        raise typer.BadParameter(exc.message) from exc
    if comment is not None:
        builder = builder.with_comment(comment)
    try:
        signature = signing_key.sign(builder)
    except (SignatureBuilderError, EncodingFailedError) as exc:
        typer.echo(f"Signing failed: {exc.message}", err=True)
        raise typer.Exit(1) from exc
    _write_or_echo(signature.model_dump_json(indent=2), out, "Signature")


@app.command("verify")
def verify(
    signature_file: Annotated[Path, typer.Argument(help="Path to the signature JSON file.")],
    public_key: Annotated[
        Path,
        typer.Option(..., "--public-key", "-p", help="Path to the public key JSON file."),
    ],
) -> None:
    """Verify a signature; print the signed message as JSON."""
    data = _read_json(signature_file, "Signature file")
    try:
        signature = Signature[Any, Any].model_validate(data)
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid signature format: {exc}") from exc
    if not public_key.exists():
        raise typer.BadParameter(f"Public key file not found: {public_key}")
    try:
        verifying_key = load_public_key_from_file(public_key)
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid public key: {exc}") from exc
    try:
        message = signature.verify(verifying_key)
    except (SignatureError, EncodingFailedError) as exc:
        typer.echo(f"Verification failed: {exc.message}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(message.model_dump_json(indent=2))
