from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from app.api.deps import get_board, get_capture_booth
from app.schemas.memory import MemoryGridOut, MemoryOut
from app.services.board import MemoryBoard
from app.services.capture_booth import CaptureBooth
from app.services.media_types import ImageResource

router = APIRouter(prefix='/memories', tags=['memories'])


async def _read_upload(image: UploadFile) -> ImageResource:
    content_type = image.content_type or ''
    if not content_type.startswith('image/'):
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail='Only image files are accepted')
    return ImageResource(
        content=await image.read(),
        filename=image.filename or 'upload',
        content_type=content_type,
    )


@router.get('', response_model=list[MemoryOut])
def list_memories_endpoint(board: MemoryBoard = Depends(get_board)) -> list[MemoryOut]:
    return board.grid.fetch_all()


@router.get('/grid', response_model=MemoryGridOut)
def memory_grid_endpoint(board: MemoryBoard = Depends(get_board)) -> MemoryGridOut:
    board.grid.fetch_all()
    return board.grid.render()


@router.post('', response_model=MemoryOut, status_code=status.HTTP_201_CREATED)
async def create_memory_endpoint(
    title: str = Form(''),
    description: str = Form(''),
    image: Optional[UploadFile] = File(None),
    use_capture: bool = Form(False),
    board: MemoryBoard = Depends(get_board),
    booth: CaptureBooth = Depends(get_capture_booth),
) -> MemoryOut:
    form = board.new_form()
    form.title = title
    form.description = description
    submitted_capture: Optional[ImageResource] = None

    if image is not None and image.filename:
        form.handle_image_capture(await _read_upload(image))
    elif use_capture:
        pending = booth.pending_image
        if pending is None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail='No captured image to submit')
        form.handle_image_capture(pending)
        submitted_capture = pending

    if not form.can_submit:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail='Title and description are required',
        )

    record = await run_in_threadpool(form.submit)
    if record is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=form.error or 'Failed to save memory')
    if submitted_capture is not None:
        booth.clear_pending(submitted_capture)
    return record
