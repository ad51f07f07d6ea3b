"""
API routes for the Lowkey steganography service
"""

import logging
import traceback
import uuid
from io import BytesIO
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from src.utility.constants_manager import ConstantsManager

from ..core.errors import InvalidCiphertext, MalformedBody
from ..core.service import LowkeyStegoService
from ..models.stego_models import StegoCapacityResult, StegoOptions
from ..utils.image_utils import load_image_from_input
from .responses import StegoAPIResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stego", tags=["stego"])

# Service instance
stego_service = LowkeyStegoService()
constants = ConstantsManager()

DECRYPT_FAILURE_MESSAGE = "Invalid passphrase or corrupted payload"


def send_response(
    status_code: int,
    message: str,
    paths: Optional[List[str]] = None,
    details: Optional[dict] = None
) -> JSONResponse:
    """
    Helper function to send consistent API responses

    Args:
        status_code: HTTP status code
        message: Response message
        paths: Optional file paths
        details: Optional additional details

    Returns:
        JSONResponse with consistent format
    """
    return JSONResponse(
        status_code=status_code,
        content=StegoAPIResult(
            success=status_code < 400,
            message=message,
            paths=paths,
            details=details
        ).model_dump()
    )


async def _store_uploads(uploads: List[UploadFile], directory: Path) -> List[Path]:
    """
    Write uploaded carriers to disk so their PNG chunks can be re-read.
    Names are prefixed with the upload position to keep them unique.
    """
    paths = []
    for index, upload in enumerate(uploads):
        name = Path(upload.filename or f"carrier_{index}.png").name
        path = directory / f"{index:03d}_{name}"
        path.write_bytes(await upload.read())
        paths.append(path)
    return paths


@router.post("/capacity", response_model=StegoCapacityResult)
async def check_capacity(
    files: Optional[List[UploadFile]] = File(None),
    url: Optional[str] = Form(None),
):
    """
    Check the combined capacity of one or more carriers

    Args:
        files: Carrier images
        url: Alternatively, a URL to fetch a single carrier from

    Returns:
        StegoCapacityResult with capacity information
    """
    try:
        if files:
            images = [load_image_from_input(file=BytesIO(await f.read())) for f in files]
        else:
            images = [load_image_from_input(url=url)]
        return stego_service.capacity(images)
    except Exception as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/encode", response_model=StegoAPIResult)
async def encode(
    carriers: List[UploadFile] = File(...),
    message: UploadFile = File(...),
    passphrase: Optional[str] = Form(None),
    auto_resize: bool = Form(False),
    min_dimension: Optional[int] = Form(None),
):
    """
    Hide a message file in one or more carrier images

    Args:
        carriers: Cover images, in embedding order
        message: File whose bytes are hidden
        passphrase: Optional passphrase for encryption
        auto_resize: Shrink a single carrier to fit the message
        min_dimension: Smallest allowed short side when auto-resizing

    Returns:
        StegoAPIResult with the written carrier paths
    """
    try:
        payload = await message.read()
        options = StegoOptions(
            passphrase=passphrase,
            auto_resize=auto_resize,
            min_dimension=min_dimension if min_dimension is not None else constants.get_min_dimension(),
        )
        logger.info(f"Received encode request: carriers={len(carriers)}, payload_len={len(payload)}, "
                    f"encrypted={bool(passphrase)}, auto_resize={auto_resize}")

        output_dir = Path(constants.get_output_dir()) / uuid.uuid4().hex
        with TemporaryDirectory() as tmp:
            inputs = await _store_uploads(carriers, Path(tmp))
            if len(inputs) == 1:
                output_path = output_dir / Path(inputs[0].name).with_suffix(".png").name
                result = stego_service.encode_file(inputs[0], payload, output_path, options)
            else:
                result = stego_service.encode_files(inputs, payload, output_dir, options)

        return send_response(
            200,
            f"Message hidden successfully across {len(result.output_paths)} carrier(s)",
            [str(p) for p in result.output_paths],
            {
                "used_capacity_bits": result.used_capacity_bits,
                "capacity_bits": result.capacity_bits,
                "payload_size_bytes": result.payload_size_bytes,
                "bits_per_carrier": result.bits_per_carrier,
                "resized_to": result.resized_to,
                "encrypted": result.encrypted_with_passphrase,
            }
        )
    except ValueError as e:
        logger.error(f"ValueError in encode: {str(e)}")
        return send_response(400, str(e))
    except Exception as e:
        logger.error(f"Unexpected error in encode: {str(e)}\n{traceback.format_exc()}")
        return send_response(500, str(e))


@router.post("/decode", response_model=StegoAPIResult)
async def decode(
    carriers: List[UploadFile] = File(...),
    passphrase: Optional[str] = Form(None),
):
    """
    Recover a hidden message from one or more carriers

    Args:
        carriers: Encoded images; reordered automatically when they carry sequence metadata
        passphrase: Passphrase used at encode time

    Returns:
        StegoAPIResult with the recovered file path and, for UTF-8 payloads, the text
    """
    try:
        logger.info(f"Received decode request: carriers={len(carriers)}, encrypted={bool(passphrase)}")
        output_file = Path(constants.get_recovered_dir()) / f"{uuid.uuid4().hex}.bin"
        with TemporaryDirectory() as tmp:
            inputs = await _store_uploads(carriers, Path(tmp))
            result = stego_service.decode_to_file(inputs, output_file, passphrase)

        try:
            text = result.payload.decode("utf-8")
        except UnicodeDecodeError:
            text = None

        return send_response(
            200,
            f"Message revealed successfully from {len(carriers)} carrier(s)",
            [str(result.output_path)],
            {
                "size_bytes": result.size_bytes,
                "auto_ordered": result.auto_ordered,
                "text": text,
            }
        )
    except (InvalidCiphertext, MalformedBody) as e:
        logger.warning(f"Decryption failed in decode: {type(e).__name__}")
        return send_response(401, DECRYPT_FAILURE_MESSAGE)
    except ValueError as e:
        logger.warning(f"ValueError in decode: {str(e)}")
        return send_response(400, str(e))
    except Exception as e:
        logger.error(f"Unexpected error in decode: {str(e)}\n{traceback.format_exc()}")
        return send_response(500, str(e))
