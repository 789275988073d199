"""Collaborator contracts for encoding and probing."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Awaitable, Protocol, Union, runtime_checkable

from ..models import EncodeConfig, SourceInfo


@runtime_checkable
class Encoder(Protocol):
    """
    Performs one transcode.

    `encode` may be a coroutine function or a plain blocking function. It
    returns when the output file has been written and raises with a
    diagnostic message otherwise.
    """

    def encode(
        self,
        source: SourceInfo,
        config: EncodeConfig,
        output_path: Path,
    ) -> Union[None, Awaitable[Any]]:
        ...


@runtime_checkable
class Prober(Protocol):
    """Extracts SourceInfo from a media file."""

    async def inspect(self, input_file: Path) -> SourceInfo:
        ...
