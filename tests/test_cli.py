import pytest

from src.services.lowkey.cli import main


def test_encode_and_decode_single_image(tmp_path, make_png, message_file, capsys):
    encoded = tmp_path / "out" / "encoded.png"
    recovered = tmp_path / "recovered.txt"

    assert main(["encode", "--image", str(make_png(width=20, height=20)), "--message", str(message_file),
                 "--output", str(encoded), "--passphrase", "pw"]) == 0
    assert f"OK: Encoded message into {encoded}" in capsys.readouterr().out

    assert main(["decode", "--image", str(encoded), "--output", str(recovered), "--passphrase", "pw"]) == 0
    assert recovered.read_bytes() == message_file.read_bytes()


def test_encode_and_decode_image_dir(tmp_path, make_png, message_file, capsys):
    images = tmp_path / "images"
    images.mkdir()
    for name in ("01.png", "02.png"):
        (images / name).write_bytes(make_png(name).read_bytes())
    encoded = tmp_path / "encoded"
    recovered = tmp_path / "recovered.txt"

    assert main(["encode", "--image-dir", str(images), "--message", str(message_file),
                 "--output-dir", str(encoded)]) == 0
    assert sorted(p.name for p in encoded.iterdir()) == ["01.png", "02.png"]

    assert main(["decode", "--image-dir", str(encoded), "--output", str(recovered)]) == 0
    assert recovered.read_bytes() == message_file.read_bytes()


@pytest.mark.parametrize(
    "extra, expected",
    [
        ([], "Must specify one of --image, --image-list, or --image-dir"),
        (["--image", "a.png", "--image-dir", "d"], "Only one of --image, --image-list, or --image-dir can be specified"),
        (["--image", "a.png"], "--output is required when using --image"),
        (["--image", "a.png", "--output", "o.png", "--output-dir", "d"], "--output-dir cannot be used with --image"),
        (["--image-list", "a.png", "b.png"], "--output-dir is required when using --image-list or --image-dir"),
        (["--image-list", "a.png", "--output-dir", "d", "--auto-resize"], "--auto-resize is not supported with multiple images"),
    ],
)
def test_encode_argument_rules(message_file, capsys, extra, expected):
    assert main(["encode", "--message", str(message_file)] + extra) == 1
    assert expected in capsys.readouterr().err


def test_encode_rejects_jpeg_output(tmp_path, make_png, message_file, capsys):
    code = main(["encode", "--image", str(make_png(width=20, height=20)), "--message", str(message_file),
                 "--output", str(tmp_path / "out.jpg")])
    assert code == 1
    assert "JPEG format is not supported" in capsys.readouterr().err


def test_decode_with_wrong_passphrase_fails(tmp_path, make_png, message_file, capsys):
    encoded = tmp_path / "encoded.png"
    main(["encode", "--image", str(make_png(width=20, height=20)), "--message", str(message_file),
          "--output", str(encoded), "--passphrase", "pw"])

    code = main(["decode", "--image", str(encoded), "--output", str(tmp_path / "m.txt"), "--passphrase", "nope"])
    assert code == 1
    assert "Failed to decode message" in capsys.readouterr().err
    assert not (tmp_path / "m.txt").exists()


def test_zero_min_dimension_is_rejected(tmp_path, make_png, message_file, capsys):
    code = main(["encode", "--image", str(make_png(width=20, height=20)), "--message", str(message_file),
                 "--output", str(tmp_path / "out.png"), "--auto-resize", "--min-dimension", "0"])
    assert code == 1
    assert "min_dimension" in capsys.readouterr().err
    assert not (tmp_path / "out.png").exists()


def test_image_list_with_clashing_names_fails(tmp_path, make_png, message_file, capsys):
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    images = [make_png("a/part.png", width=20, height=20), make_png("b/part.png", width=20, height=20)]
    code = main(["encode", "--image-list", *map(str, images), "--message", str(message_file),
                 "--output-dir", str(tmp_path / "out")])
    assert code == 1
    assert "would overwrite each other's output" in capsys.readouterr().err
