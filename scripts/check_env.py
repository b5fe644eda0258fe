"""Validate the session service configuration and detect ``.env`` drift.

Commands:

``check``
    Load the ``.env`` file into ``AppSettings`` and make sure the session
    database directory can be created. Prints the effective token lifetimes
    and inactivity policy.
``record``
    Run ``check`` and store the checksum of the ``.env`` file as a baseline.
``verify``
    Run ``check`` and compare the ``.env`` checksum against the baseline, so a
    rotated Keycloak secret or encryption key is noticed before a restart
    silently invalidates every stored session.

Example::

    python -m scripts.check_env record --env-file /opt/setoran/.env \
        --hash-file /opt/setoran/.env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from setoran_auth.core.config import AppSettings

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


def _checksum(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _load_settings(env_file: Path) -> AppSettings:
    if not env_file.is_file():
        raise FileNotFoundError(f"Environment file {env_file} does not exist.")
    load_dotenv(env_file, override=False)
    return AppSettings()  # type: ignore[call-arg]


def _describe(settings: AppSettings) -> None:
    session = settings.session
    print(
        f"Keycloak realm {settings.identity.realm} at {settings.identity.base_url}\n"
        f"access token {session.access_token_ttl_seconds}s, "
        f"refresh token {session.refresh_token_ttl_seconds}s, "
        f"inactivity {session.inactivity_threshold_seconds}s "
        f"(checked every {session.check_interval_seconds}s)"
    )
    if settings.security.token_encryption_secret is None:
        print(
            "TOKEN_ENCRYPTION_SECRET is not set; stored tokens are encrypted with "
            "a key derived from the Keycloak client secret.",
            file=sys.stderr,
        )


def _ensure_storage(settings: AppSettings) -> None:
    Path(settings.session.db_path).parent.mkdir(parents=True, exist_ok=True)


def _record(env_file: Path, hash_file: Path) -> int:
    checksum = _checksum(env_file)
    hash_file.write_text(f"{checksum}\n", encoding="utf-8")
    print(f"Recorded {env_file} checksum {checksum} in {hash_file}")
    return EXIT_OK


def _verify(env_file: Path, hash_file: Path) -> int:
    if not hash_file.is_file():
        print(
            f"No checksum baseline at {hash_file}; run 'record' first.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _checksum(env_file)
    if expected != actual:
        print(
            f"{env_file} changed since the baseline was recorded "
            f"(expected {expected}, found {actual}). Stored sessions may no longer "
            "decrypt after a restart.",
            file=sys.stderr,
        )
        return EXIT_CHECKSUM_ERROR
    print("Environment checksum OK.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, needs_hash in (("check", False), ("record", True), ("verify", True)):
        subparser = subparsers.add_parser(name)
        subparser.add_argument("--env-file", default=Path(".env"), type=Path)
        if needs_hash:
            subparser.add_argument("--hash-file", required=True, type=Path)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = _load_settings(args.env_file)
        _ensure_storage(settings)
    except ValidationError as exc:
        print(f"Invalid configuration:\n{exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except (FileNotFoundError, OSError) as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    _describe(settings)
    if args.command == "record":
        return _record(args.env_file, args.hash_file)
    if args.command == "verify":
        return _verify(args.env_file, args.hash_file)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
