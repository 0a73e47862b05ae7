"""Image text extraction endpoint."""

from typing import Optional
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from core.exceptions import UploadTooLargeError
from core.logging import log
from ingestion.file_handler import UploadReceiver, get_upload_receiver
from ocr.extractor import TextExtractor, get_text_extractor

router = APIRouter(tags=["Image OCR"])

NO_FILE_MESSAGE = "No file uploaded. Only jpg and png types accepted"
UNKNOWN_ERROR_MESSAGE = "Unknown error occured"
SUCCESS_MESSAGE = "Image text extracted successfully"


class ExtractTextResponse(BaseModel):
    """Successful extraction envelope."""
    success: bool
    message: str
    data: str


class FailureResponse(BaseModel):
    """Failure envelope."""
    success: bool = False
    message: str


def failure(message: str, status_code: int = 400) -> JSONResponse:
    """Build a failure envelope response."""
    return JSONResponse(
        status_code=status_code,
        content=FailureResponse(message=message).model_dump(),
    )


@router.post(
    "/extract-text",
    response_model=ExtractTextResponse,
    summary="Upload an image file to extract text",
    responses={
        400: {"model": FailureResponse, "description": "No file uploaded or text extraction failed"},
        413: {"model": FailureResponse, "description": "File too large"},
    },
)
async def extract_text(
    file: Optional[UploadFile] = File(None, description="Image file to be processed (jpg or png)"),
    receiver: UploadReceiver = Depends(get_upload_receiver),
    extractor: TextExtractor = Depends(get_text_extractor),
):
    """Extracts text from an uploaded image and returns it as JSON.
    
    The stored upload is removed before the response is returned,
    whatever the outcome.
    """
    try:
        async with receiver.stored_upload(file) as upload:
            if upload is None:
                return failure(NO_FILE_MESSAGE)
            
            result = await extractor.extract_async(upload.stored_path)
            if not result.succeeded:
                log.warning(f"Text extraction failed for upload: {upload.original_name}")
                return failure(UNKNOWN_ERROR_MESSAGE)
            
            log.info(f"Extracted {len(result.text)} characters from {upload.original_name}")
            return ExtractTextResponse(
                success=True,
                message=SUCCESS_MESSAGE,
                data=result.text,
            )
    
    except UploadTooLargeError:
        raise
    except Exception as e:
        log.error(f"Unexpected error while extracting text: {str(e)}")
        return failure(UNKNOWN_ERROR_MESSAGE)
