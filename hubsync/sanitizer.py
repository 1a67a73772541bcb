"""RefSanitizer: strips hosting-generated read-only refs from a local mirror.

GitHub creates refs/pull/<n>/{head,merge} for every pull request. A mirror
clone fetches them like any other ref, but the destination rejects them on a
mirror push, so they have to be dropped from the mirror before every push.
See https://github.com/rtyley/bfg-repo-cleaner/issues/36
"""

from __future__ import annotations

import logging
import os
import re
import shutil
from collections.abc import Iterable

from hubsync.errors import RefSanitizationError
from hubsync.models import LocalMirror

PULL_REF_NAMESPACE = 'refs/pull'

READONLY_REF_LINE = re.compile(rb'^[0-9a-fA-F]{40} refs/pull/[0-9]+/(head|pull|merge)')

logger = logging.getLogger(__name__)


def filter_packed_refs(lines: Iterable[bytes]) -> list[bytes]:
    """Drop packed-refs lines that point at read-only pull refs.

    All other lines, including the header and peeled '^' lines, are kept
    byte-for-byte and in order.
    """
    return [line for line in lines if not READONLY_REF_LINE.match(line)]


class RefSanitizer:
    """Removes read-only refs from a mirror so it can be force-pushed"""

    def sanitize(self, mirror: LocalMirror) -> int:
        """Delete loose pull refs and rewrite packed-refs. Returns the number of packed lines dropped."""
        self._remove_loose_refs(mirror)
        return self._rewrite_packed_refs(mirror)

    def _remove_loose_refs(self, mirror: LocalMirror) -> None:
        loose = mirror.path / PULL_REF_NAMESPACE
        if not loose.exists():
            return
        try:
            shutil.rmtree(loose)
        except OSError as e:
            raise RefSanitizationError(f"Failed to remove {loose}: {e}") from e

    def _rewrite_packed_refs(self, mirror: LocalMirror) -> int:
        packed = mirror.packed_refs_path
        if not packed.is_file():
            return 0
        temp_path = packed.with_name(packed.name + '.tmp')
        try:
            lines = packed.read_bytes().splitlines(keepends=True)
            kept = filter_packed_refs(lines)
            dropped = len(lines) - len(kept)
            if dropped:
                # packed-refs is only ever replaced whole
                temp_path.write_bytes(b''.join(kept))
                os.replace(temp_path, packed)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise RefSanitizationError(f"Failed to rewrite {packed}: {e}") from e

        if dropped:
            logger.debug("Dropped %d read-only refs from %s", dropped, packed)
        return dropped
