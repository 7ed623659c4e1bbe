from __future__ import annotations

import dataclasses
import io
import os

import cv2
import numpy as np
import pytest

import generate_pattern
from generate_pattern import BmpStreamSink, FramePreview, OutputIOError, main, run
from render_frame import RenderConfig, render
from split_bmp_stream import iter_bitmaps


class RecordingSink:
    def __init__(self, fail_at: int | None = None) -> None:
        self.frames: list[np.ndarray] = []
        self.fail_at = fail_at

    def write(self, raster: np.ndarray) -> None:
        if self.fail_at is not None and len(self.frames) == self.fail_at:
            raise OutputIOError("disk full")
        self.frames.append(raster)


class BrokenStream:
    def write(self, data: bytes) -> int:
        raise BrokenPipeError("reader went away")

    def flush(self) -> None:
        pass


@pytest.fixture()
def short_config(config480: RenderConfig) -> RenderConfig:
    return dataclasses.replace(config480, total_frames=4)


def test_run_emits_every_frame_in_order(short_config: RenderConfig) -> None:
    sink = RecordingSink()
    assert run(short_config, sink) == short_config.total_frames + 1
    assert len(sink.frames) == 5
    for frame, raster in enumerate(sink.frames):
        assert np.array_equal(raster, render(short_config, frame))


def test_run_halts_on_write_failure(short_config: RenderConfig, monkeypatch) -> None:
    rendered = []

    def tracking_render(config, frame):
        rendered.append(frame)
        return render(config, frame)

    monkeypatch.setattr(generate_pattern, "render", tracking_render)
    sink = RecordingSink(fail_at=2)
    with pytest.raises(OutputIOError):
        run(short_config, sink)
    assert len(sink.frames) == 2
    assert rendered == [0, 1, 2]


def test_run_last_frame(config480: RenderConfig) -> None:
    sink = RecordingSink()
    assert run(config480, sink, last_frame=2) == 3
    with pytest.raises(ValueError):
        run(config480, sink, last_frame=config480.total_frames + 1)


def test_bmp_sink_writes_lossless_bitmap(config480: RenderConfig) -> None:
    raster = render(config480, 77)
    buf = io.BytesIO()
    sink = BmpStreamSink(buf)
    sink.write(raster)

    data = buf.getvalue()
    assert data[:2] == b"BM"
    assert int.from_bytes(data[2:6], "little") == len(data)
    decoded = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert np.array_equal(decoded, raster)
    assert sink.written == 1


def test_bmp_sink_wraps_io_errors(config480: RenderConfig) -> None:
    sink = BmpStreamSink(BrokenStream())
    with pytest.raises(OutputIOError) as info:
        sink.write(render(config480, 0))
    assert isinstance(info.value.__cause__, BrokenPipeError)
    assert sink.written == 0


def test_preview_disables_itself_without_display(monkeypatch) -> None:
    def no_display(*args, **kwargs):
        raise cv2.error("cannot open display")

    monkeypatch.setattr(generate_pattern.cv2, "imshow", no_display)
    preview = FramePreview()
    preview.show(np.zeros((4, 4, 3), dtype=np.uint8))
    assert preview.enabled is False
    preview.show(np.zeros((4, 4, 3), dtype=np.uint8))


def test_main_writes_requested_frames(tmp_path) -> None:
    out = tmp_path / "pattern.bmps"
    main(["480", "-o", str(out), "--last-frame", "2"])
    with open(out, "rb") as fh:
        bitmaps = list(iter_bitmaps(fh))
    assert len(bitmaps) == 3


@pytest.mark.parametrize("argv", [["500"], ["480", "--last-frame", "216001"]])
def test_main_rejects_bad_arguments(tmp_path, argv) -> None:
    out = tmp_path / "pattern.bmps"
    with pytest.raises(SystemExit) as info:
        main(argv + ["-o", str(out)])
    assert info.value.code != 0
    assert not out.exists()


def test_preview_close_without_window(monkeypatch) -> None:
    destroyed = []
    monkeypatch.setattr(generate_pattern.cv2, "destroyWindow", destroyed.append)
    preview = FramePreview()
    preview.close()
    assert destroyed == []
    assert preview.enabled is False


@pytest.mark.skipif(not os.path.exists("/dev/full"), reason="needs /dev/full")
@pytest.mark.parametrize("extra", [[], ["--preview"]])
def test_main_exits_1_when_output_is_full(extra, capsys) -> None:
    with pytest.raises(SystemExit) as info:
        main(["480", "-o", "/dev/full", "--last-frame", "1"] + extra)
    assert info.value.code == 1
    assert "✖" in capsys.readouterr().err


def test_main_exits_1_on_failing_write(tmp_path, monkeypatch) -> None:
    def full(self, raster):
        raise OutputIOError("No space left on device")

    monkeypatch.setattr(BmpStreamSink, "write", full)
    with pytest.raises(SystemExit) as info:
        main(["480", "-o", str(tmp_path / "pattern.bmps"), "--last-frame", "1"])
    assert info.value.code == 1


def test_main_exits_1_on_missing_directory(tmp_path, capsys) -> None:
    out = tmp_path / "missing" / "pattern.bmps"
    with pytest.raises(SystemExit) as info:
        main(["480", "-o", str(out), "--last-frame", "0"])
    assert info.value.code == 1
    assert "cannot open" in capsys.readouterr().err


def test_main_exits_1_on_broken_font(tmp_path, monkeypatch) -> None:
    def broken(*args, **kwargs):
        raise cv2.error("no font")

    out = tmp_path / "pattern.bmps"
    monkeypatch.setattr(generate_pattern.cv2, "getTextSize", broken)
    with pytest.raises(SystemExit) as info:
        main(["480", "-o", str(out), "--last-frame", "0"])
    assert info.value.code == 1
    assert not out.exists()
