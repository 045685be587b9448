import json
from unittest.mock import Mock

import pytest
import yaml

from conflux.codec import JSONCodec, YAMLCodec
from conflux.core.exceptions import CodecError, DumpError
from conflux.dumper import FileDumper


class TestFileDumper:
    """Test persisting an aggregate to a file."""

    def test_writes_json(self, tmp_path, ctx):
        path = tmp_path / "out.json"

        FileDumper(path, JSONCodec()).dump(ctx, {"server": {"port": 8080}})

        assert json.loads(path.read_text()) == {"server": {"port": 8080}}

    def test_creates_parent_directories(self, tmp_path, ctx):
        path = tmp_path / "nested" / "dir" / "out.yaml"

        FileDumper(str(path), YAMLCodec()).dump(ctx, {"a": [1, 2]})

        assert yaml.safe_load(path.read_text()) == {"a": [1, 2]}

    def test_overwrites_existing_file(self, tmp_path, ctx):
        path = tmp_path / "out.json"
        path.write_text("stale")

        FileDumper(path, JSONCodec()).dump(ctx, {})

        assert json.loads(path.read_text()) == {}

    def test_encode_error(self, tmp_path, ctx):
        encoder = Mock()
        encoder.encode.side_effect = CodecError("json", "encode", TypeError("nope"))

        with pytest.raises(DumpError) as exc_info:
            FileDumper(tmp_path / "out.json", encoder).dump(ctx, {"a": 1})

        assert exc_info.value.operation == "encode"
        assert not (tmp_path / "out.json").exists()

    def test_write_error(self, tmp_path, ctx):
        blocker = tmp_path / "file"
        blocker.write_text("")

        with pytest.raises(DumpError) as exc_info:
            FileDumper(blocker / "out.json", JSONCodec()).dump(ctx, {"a": 1})

        assert exc_info.value.operation == "write"
