from conflux.conflux import Conflux
from conflux.context import Context, background
from conflux.binder import Binder, setting
from conflux.validator import JSONSchemaValidator, SchemaValidator, ValidationPipeline
from conflux.codec import (
    CodecType, CodecRegistry, Decoder, Encoder, register_default_codecs,
    get_codec_registry, register_encoder, register_decoder, get_encoder, get_decoder
)
from conflux.source import (
    Source, FileSource, ContentSource, OSEnvVarSource, ConsulSource, MapSource
)
from conflux.dumper import Dumper, FileDumper
from conflux.core import *
from conflux.logger import init_logger, get_conflux_logger

__version__ = '0.1.0'
