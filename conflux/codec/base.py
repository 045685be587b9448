from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class CodecType(str, Enum):
    """Identifiers of the built-in formats."""
    JSON = "json"
    YAML = "yaml"
    ENV_VAR = "env_var"
    SCALAR = "scalar"

    def __str__(self) -> str:
        return self.value


class Decoder(ABC):
    """
    Converts raw bytes into a structured value.
    """

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        """
        Decode ``data``.

        Parameters
        ----------
        data : bytes
            Raw payload read by a source

        Returns
        -------
        Any
            The structured value, usually a mapping

        Raises
        ------
        CodecError
            If the payload is malformed
        """
        raise NotImplementedError("Subclasses must implement decode()")


class Encoder(ABC):
    """
    Converts a structured value into raw bytes.
    """

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """
        Encode ``value``.

        Raises
        ------
        CodecError
            If the value cannot be represented in the format
        """
        raise NotImplementedError("Subclasses must implement encode()")


def to_text(data: Any) -> str:
    """Accept bytes or str payloads alike."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8")
    return str(data)
