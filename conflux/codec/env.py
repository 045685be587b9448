"""
Environment-variable folding.

Turns flat ``KEY=VALUE`` entries into a nested mapping by splitting the
lower-cased key on underscores: ``DB_USER_NAME=admin`` becomes
``{"db": {"user": {"name": "admin"}}}``. Values stay raw strings; casting
happens when they are read.
"""

from typing import Any, Dict, Iterable

from .base import Decoder, to_text


class EnvVarCodec(Decoder):
    """Decoder for newline-separated ``KEY=VALUE`` text."""

    def decode(self, data: bytes) -> Dict[str, Any]:
        return self.fold(to_text(data).splitlines())

    @staticmethod
    def fold(entries: Iterable[str]) -> Dict[str, Any]:
        """
        Fold ``KEY=VALUE`` entries into a nested mapping.

        Entries are processed in key order so that a collision between a
        scalar and a nested key (``A_B`` against ``A_B_C``) always resolves
        the same way: the entry processed later replaces the scalar with a
        mapping. Entries without ``=`` are skipped, as are keys made only of
        underscores.
        """
        pairs = []
        for entry in entries:
            key, sep, value = entry.partition("=")
            if not sep:
                continue
            segments = [part for part in key.lower().split("_") if part]
            if not segments:
                continue
            pairs.append((segments, value.strip()))

        pairs.sort(key=lambda pair: pair[0])

        conf: Dict[str, Any] = {}
        for segments, value in pairs:
            current = conf
            for part in segments[:-1]:
                nested = current.get(part)
                if not isinstance(nested, dict):
                    nested = {}
                    current[part] = nested
                current = nested
            current[segments[-1]] = value

        return conf
