"""
Process-wide registry of encoders and decoders.

The registry starts empty. Applications call :func:`register_default_codecs`
(or register their own codecs) from their entry point, so the set of
available formats never depends on import order.
"""

import threading
from typing import Dict, List, Union

from conflux.core.exceptions import UnregisteredCodecError
from conflux.logger import get_conflux_logger
from .base import CodecType, Decoder, Encoder

CodecKey = Union[CodecType, str]


def _key(codec_type: CodecKey) -> str:
    return codec_type.value if isinstance(codec_type, CodecType) else str(codec_type)


class CodecRegistry:
    """
    Registry mapping a format identifier to its encoder and decoder.
    """

    def __init__(self):
        self.logger = get_conflux_logger(component="CodecRegistry")
        self._lock = threading.RLock()
        self._encoders: Dict[str, Encoder] = {}
        self._decoders: Dict[str, Decoder] = {}

    def register_encoder(self, codec_type: CodecKey, encoder: Encoder):
        """Register (or replace) the encoder for a format."""
        with self._lock:
            self._encoders[_key(codec_type)] = encoder
        self.logger.debug("Encoder registered", codec=_key(codec_type), encoder=type(encoder).__name__)

    def register_decoder(self, codec_type: CodecKey, decoder: Decoder):
        """Register (or replace) the decoder for a format."""
        with self._lock:
            self._decoders[_key(codec_type)] = decoder
        self.logger.debug("Decoder registered", codec=_key(codec_type), decoder=type(decoder).__name__)

    def get_encoder(self, codec_type: CodecKey) -> Encoder:
        """
        Get the encoder for a format.

        Raises:
            UnregisteredCodecError: If no encoder is registered for the format
        """
        with self._lock:
            encoder = self._encoders.get(_key(codec_type))
        if encoder is None:
            raise UnregisteredCodecError(_key(codec_type), "encoder")
        return encoder

    def get_decoder(self, codec_type: CodecKey) -> Decoder:
        """
        Get the decoder for a format.

        Raises:
            UnregisteredCodecError: If no decoder is registered for the format
        """
        with self._lock:
            decoder = self._decoders.get(_key(codec_type))
        if decoder is None:
            raise UnregisteredCodecError(_key(codec_type), "decoder")
        return decoder

    def list_formats(self) -> List[str]:
        """List every format with an encoder or a decoder."""
        with self._lock:
            return sorted(set(self._encoders) | set(self._decoders))

    def clear(self):
        """Remove every registration."""
        with self._lock:
            self._encoders.clear()
            self._decoders.clear()


_default_registry = CodecRegistry()


def get_codec_registry() -> CodecRegistry:
    """Return the process-wide registry."""
    return _default_registry


def register_encoder(codec_type: CodecKey, encoder: Encoder):
    _default_registry.register_encoder(codec_type, encoder)


def register_decoder(codec_type: CodecKey, decoder: Decoder):
    _default_registry.register_decoder(codec_type, decoder)


def get_encoder(codec_type: CodecKey) -> Encoder:
    return _default_registry.get_encoder(codec_type)


def get_decoder(codec_type: CodecKey) -> Decoder:
    return _default_registry.get_decoder(codec_type)


def register_default_codecs(registry: CodecRegistry = None) -> CodecRegistry:
    """
    Register the built-in JSON, YAML, env-var and scalar codecs.

    Args:
        registry: Registry to populate; defaults to the process-wide one

    Returns:
        The populated registry
    """
    from .env import EnvVarCodec
    from .json_codec import JSONCodec
    from .yaml_codec import ScalarCodec, YAMLCodec

    if registry is None:
        registry = _default_registry

    json_codec = JSONCodec()
    yaml_codec = YAMLCodec()
    registry.register_encoder(CodecType.JSON, json_codec)
    registry.register_decoder(CodecType.JSON, json_codec)
    registry.register_encoder(CodecType.YAML, yaml_codec)
    registry.register_decoder(CodecType.YAML, yaml_codec)
    registry.register_decoder(CodecType.ENV_VAR, EnvVarCodec())
    registry.register_decoder(CodecType.SCALAR, ScalarCodec())

    return registry
