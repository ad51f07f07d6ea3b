from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.services.lowkey.main import router


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("LOWKEY_OUTPUT_DIR", str(tmp_path / "stego"))
    monkeypatch.setenv("LOWKEY_RECOVERED_DIR", str(tmp_path / "recovered"))
    app = FastAPI()
    app.include_router(router)
    return TestClient(app)


def upload(path, field="carriers"):
    return (field, (Path(path).name, Path(path).read_bytes(), "image/png"))


def encode(client, carriers, message, passphrase=None, **form):
    files = [upload(p) for p in carriers] + [("message", ("message.txt", message, "text/plain"))]
    data = dict(form)
    if passphrase is not None:
        data["passphrase"] = passphrase
    return client.post("/stego/encode", files=files, data=data)


def test_capacity_endpoint(client, make_png):
    response = client.post("/stego/capacity", files=[upload(make_png(), "files"), upload(make_png("b.png"), "files")])
    assert response.status_code == 200
    body = response.json()
    assert body["capacity_bits"] == 800
    assert body["capacity_per_carrier"] == [400, 400]


def test_capacity_endpoint_requires_input(client):
    response = client.post("/stego/capacity")
    assert response.status_code == 400


def test_single_carrier_round_trip(client, make_png):
    response = encode(client, [make_png()], b"hello over http", passphrase="pw")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    [output] = body["paths"]
    assert output.endswith(".png")

    response = client.post("/stego/decode", files=[upload(output)], data={"passphrase": "pw"})
    assert response.status_code == 200
    details = response.json()["details"]
    assert details["text"] == "hello over http"
    assert details["size_bytes"] == len(b"hello over http")
    assert Path(response.json()["paths"][0]).read_bytes() == b"hello over http"


def test_multi_carrier_round_trip_in_any_order(client, make_png):
    response = encode(client, [make_png("01.png"), make_png("02.png")], b"m" * 40)
    assert response.status_code == 200
    outputs = response.json()["paths"]
    assert len(outputs) == 2

    response = client.post("/stego/decode", files=[upload(p) for p in reversed(outputs)])
    assert response.status_code == 200
    assert response.json()["details"]["auto_ordered"] is True
    assert response.json()["details"]["text"] == "m" * 40


def test_wrong_passphrase_gets_generic_message(client, make_png):
    [output] = encode(client, [make_png()], b"secret", passphrase="pw").json()["paths"]
    response = client.post("/stego/decode", files=[upload(output)], data={"passphrase": "nope"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid passphrase or corrupted payload"


def test_too_large_message_is_a_client_error(client, make_png):
    response = encode(client, [make_png()], b"x" * 100)
    assert response.status_code == 400
    assert "Capacity: 400 bits" in response.json()["message"]


def test_zero_min_dimension_is_a_client_error(client, make_png):
    response = encode(client, [make_png(width=20, height=20)], b"secret", auto_resize="true", min_dimension="0")
    assert response.status_code == 400
    assert "min_dimension" in response.json()["message"]
