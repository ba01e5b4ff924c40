"""Bundling of resolver and function source files.

The Bundler turns an entry file into a deployable code reference. Code
references are content-addressed: the hash covers the entry file's bytes and
the bundling options, so identical inputs never rebuild and any change
produces a new address.

Example:
    >>> bundler = EsbuildBundler(out_dir=Path("cdk.out/appsync"))
    >>> code = bundler.bundle(Path("resolvers/Query.getUser.[users].ts"), BundlingOptions())
    >>> code.asset_hash
    '5f1c...'
"""

from __future__ import annotations

import hashlib
import json
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from .exceptions import BundlingError
from .logging import log_debug, log_info
from .types import BundlingOptions

APPSYNC_UTILS_MODULE = "@aws-appsync/utils"


class CodeAsset(BaseModel):
    """A bundled code artifact."""

    model_config = ConfigDict(frozen=True)

    asset_hash: str
    entry_file: Path
    path: Path | None = None


class InlineCode(BaseModel):
    """Code given inline instead of bundled from a file."""

    model_config = ConfigDict(frozen=True)

    source: str


Code = CodeAsset | InlineCode


def fingerprint(entry_file: Path | str, options: BundlingOptions | None = None) -> str:
    """Hash an entry file together with its bundling options.

    Args:
        entry_file: File to hash.
        options: Bundling options mixed into the hash.

    Returns:
        Hex sha256 digest.
    """
    options = options or BundlingOptions()
    digest = hashlib.sha256()
    digest.update(Path(entry_file).read_bytes())
    digest.update(json.dumps(options.model_dump(), sort_keys=True).encode("utf-8"))
    return digest.hexdigest()


class BaseBundler(ABC):
    """Contract of the bundling collaborator."""

    @abstractmethod
    def bundle(self, entry_file: Path, options: BundlingOptions | None = None) -> CodeAsset:
        """Produce a code reference for ``entry_file``.

        Raises:
            BundlingError: If the artifact cannot be produced.
        """
        ...


class EsbuildBundler(BaseBundler):
    """Bundles with a local esbuild executable.

    Output lands in ``<out_dir>/asset.<hash>/``. An existing output
    directory for the same hash is reused without running esbuild again.
    """

    def __init__(self, out_dir: Path | str, command: str = "esbuild") -> None:
        self._out_dir = Path(out_dir)
        self._command = command

    @property
    def out_dir(self) -> Path:
        return self._out_dir

    def bundle(self, entry_file: Path, options: BundlingOptions | None = None) -> CodeAsset:
        options = options or BundlingOptions()
        entry_file = Path(entry_file)
        asset_hash = fingerprint(entry_file, options)

        output_dir = self._out_dir / f"asset.{asset_hash}"
        output_file = output_dir / f"{entry_file.stem}.js"
        if output_file.is_file():
            log_debug(f"Reusing bundle for {entry_file}", {"asset_hash": asset_hash})
            return CodeAsset(asset_hash=asset_hash, entry_file=entry_file, path=output_file)

        output_dir.mkdir(parents=True, exist_ok=True)
        self._exec(self.build_command(entry_file, output_dir, options))

        log_info(f"Bundled {entry_file}", {"asset_hash": asset_hash})
        return CodeAsset(asset_hash=asset_hash, entry_file=entry_file, path=output_file)

    def build_command(
        self, entry_file: Path, output_dir: Path, options: BundlingOptions
    ) -> list[str]:
        command = [self._command, "--bundle"]
        if not options.exclude_source_map:
            command += ["--sourcemap=inline", "--sources-content=false"]
        command += [
            "--target=esnext",
            "--platform=node",
            "--format=esm",
            f"--external:{APPSYNC_UTILS_MODULE}",
            f"--outdir={output_dir}",
            str(entry_file),
        ]
        return command

    @staticmethod
    def _exec(command: list[str]) -> subprocess.CompletedProcess[str]:
        try:
            proc = subprocess.run(command, capture_output=True, text=True, check=False)
        except OSError as e:
            raise BundlingError(f"Failed to run {command[0]}: {e}") from e

        if proc.returncode != 0:
            stdout = (proc.stdout or "").strip()
            stderr = (proc.stderr or "").strip()
            if stdout or stderr:
                message = f"[Status {proc.returncode}] stdout: {stdout}\n\n\nstderr: {stderr}"
            else:
                message = f"{' '.join(command)} exited with status {proc.returncode}"
            raise BundlingError(message, returncode=proc.returncode, stdout=stdout, stderr=stderr)

        return proc


__all__ = [
    "BaseBundler",
    "Code",
    "CodeAsset",
    "EsbuildBundler",
    "InlineCode",
    "fingerprint",
]
