import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from pixload import qoi
from pixload.qoi import Colorspace, QoiDesc, QoiError
from pixload.surface import ImageError


def _header(width, height, channels, colorspace):
    return (
        b"qoif"
        + width.to_bytes(4, "big")
        + height.to_bytes(4, "big")
        + bytes((channels, colorspace))
    )


def test_header_and_padding_layout():
    desc = QoiDesc(2, 3, 4, Colorspace.LINEAR)
    encoded = qoi.encode(bytes(2 * 3 * 4), desc)
    assert encoded[:14] == _header(2, 3, 4, 1)
    assert encoded[-8:] == qoi.PADDING


def test_start_pixel_is_encoded_as_run():
    encoded = qoi.encode(bytes((0, 0, 0, 255)), QoiDesc(1, 1, 4))
    assert encoded[14:-8] == bytes((qoi.OP_RUN,))


def test_rgba_chunk_when_alpha_changes():
    encoded = qoi.encode(bytes((10, 20, 30, 40)), QoiDesc(1, 1, 4))
    assert encoded[14:-8] == bytes((qoi.OP_RGBA, 10, 20, 30, 40))


def test_rgb_chunk_for_large_difference():
    encoded = qoi.encode(bytes((100, 0, 200)), QoiDesc(1, 1, 3))
    assert encoded[14:-8] == bytes((qoi.OP_RGB, 100, 0, 200))


def test_long_run_is_split_and_decodes():
    pixels = bytes((0, 0, 0, 255)) * 100
    encoded = qoi.encode(pixels, QoiDesc(100, 1, 4))
    chunks = encoded[14:-8]
    assert all(byte & qoi.MASK_2 == qoi.OP_RUN for byte in chunks)
    assert all((byte & 0x3F) + 1 <= 62 for byte in chunks)
    assert sum((byte & 0x3F) + 1 for byte in chunks) == 100
    desc, decoded = qoi.decode(encoded)
    assert decoded == pixels
    assert desc == QoiDesc(100, 1, 4, Colorspace.SRGB)


def test_rgb_decoded_as_rgba_gets_opaque_alpha():
    pixels = bytes((1, 2, 3, 200, 100, 50))
    _, decoded = qoi.decode(qoi.encode(pixels, QoiDesc(2, 1, 3)), channels=4)
    assert decoded == bytes((1, 2, 3, 255, 200, 100, 50, 255))


def test_rgba_decoded_as_rgb_drops_alpha():
    pixels = bytes((1, 2, 3, 4, 5, 6, 7, 8))
    desc, decoded = qoi.decode(qoi.encode(pixels, QoiDesc(2, 1, 4)), channels=3)
    assert decoded == bytes((1, 2, 3, 5, 6, 7))
    assert desc.channels == 4


@settings(max_examples=60, deadline=None)
@given(st.data())
def test_round_trip(data):
    width = data.draw(st.integers(1, 8))
    height = data.draw(st.integers(1, 8))
    channels = data.draw(st.sampled_from([3, 4]))
    colorspace = data.draw(st.sampled_from(list(Colorspace)))
    palette = data.draw(st.lists(st.binary(min_size=channels, max_size=channels), min_size=1, max_size=4))
    pixels = b"".join(
        data.draw(st.lists(st.sampled_from(palette), min_size=width * height, max_size=width * height))
    )
    desc = QoiDesc(width, height, channels, colorspace)
    encoded = qoi.encode(pixels, desc)
    got_desc, decoded = qoi.decode(encoded)
    assert decoded == pixels
    assert got_desc == desc


@settings(max_examples=40, deadline=None)
@given(st.binary(min_size=48, max_size=48))
def test_round_trip_random_bytes(pixels):
    _, decoded = qoi.decode(qoi.encode(pixels, QoiDesc(4, 3, 4)))
    assert decoded == pixels


@pytest.mark.parametrize(
    "desc",
    [
        QoiDesc(0, 1, 4),
        QoiDesc(1, 0, 4),
        QoiDesc(1, 1, 2),
        QoiDesc(1, 1, 5),
        QoiDesc(1, 1, 4, 2),
        QoiDesc(20000, 20000, 4),
    ],
)
def test_encode_rejects_invalid_desc(desc):
    with pytest.raises(QoiError):
        qoi.encode(bytes(16), desc)


def test_encode_rejects_short_data():
    with pytest.raises(QoiError):
        qoi.encode(bytes(5), QoiDesc(2, 1, 3))


def test_decode_rejects_bad_magic():
    encoded = bytearray(qoi.encode(bytes(4), QoiDesc(1, 1, 4)))
    encoded[0:4] = b"qoix"
    with pytest.raises(QoiError):
        qoi.decode(bytes(encoded))


def test_decode_rejects_short_data():
    with pytest.raises(QoiError):
        qoi.decode(_header(1, 1, 4, 0))


def test_decode_rejects_bad_requested_channels():
    encoded = qoi.encode(bytes(4), QoiDesc(1, 1, 4))
    with pytest.raises(QoiError):
        qoi.decode(encoded, channels=2)


def test_decode_rejects_bad_header_channels():
    data = _header(1, 1, 7, 0) + qoi.PADDING
    with pytest.raises(QoiError):
        qoi.decode(data)


def test_qoi_error_is_image_error():
    with pytest.raises(ImageError):
        qoi.decode(b"")


def test_file_round_trip(tmp_path):
    path = tmp_path / "image.qoi"
    pixels = bytes(range(24))
    desc = QoiDesc(3, 2, 4, Colorspace.SRGB)
    written = qoi.write(path, pixels, desc)
    assert written == path.stat().st_size
    assert path.read_bytes() == qoi.encode(pixels, desc)
    got_desc, decoded = qoi.read(path)
    assert decoded == pixels
    assert got_desc == desc


def test_read_empty_file(tmp_path):
    path = tmp_path / "empty.qoi"
    path.write_bytes(b"")
    with pytest.raises(QoiError):
        qoi.read(path)