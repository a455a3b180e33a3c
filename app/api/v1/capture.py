from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from app.api.deps import get_capture_booth
from app.schemas.capture import CaptureStateOut, PendingImageOut
from app.services.capture_booth import CaptureBooth
from app.services.capture_service import CaptureState, CaptureStateError
from app.services.media_types import ImageResource

router = APIRouter(prefix='/capture', tags=['capture'])


def _state_out(booth: CaptureBooth) -> CaptureStateOut:
    pending = booth.pending_image
    return CaptureStateOut(
        state=booth.state.value,
        has_preview=booth.state in (CaptureState.streaming, CaptureState.frozen),
        pending_image=PendingImageOut(
            filename=pending.filename,
            content_type=pending.content_type,
            size=pending.size,
        )
        if pending
        else None,
    )


def _conflict(exc: CaptureStateError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.post('', response_model=CaptureStateOut)
def start_capture_endpoint(booth: CaptureBooth = Depends(get_capture_booth)) -> CaptureStateOut:
    booth.start()
    return _state_out(booth)


@router.get('', response_model=CaptureStateOut)
def capture_state_endpoint(booth: CaptureBooth = Depends(get_capture_booth)) -> CaptureStateOut:
    return _state_out(booth)


@router.get('/preview')
def capture_preview_endpoint(booth: CaptureBooth = Depends(get_capture_booth)) -> Response:
    frame = booth.preview()
    if frame is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='No preview available')
    return Response(content=frame, media_type='image/jpeg', headers={'Cache-Control': 'no-store'})


@router.post('/freeze', response_model=CaptureStateOut)
def freeze_capture_endpoint(booth: CaptureBooth = Depends(get_capture_booth)) -> CaptureStateOut:
    try:
        booth.freeze()
    except CaptureStateError as exc:
        raise _conflict(exc)
    return _state_out(booth)


@router.post('/retake', response_model=CaptureStateOut)
def retake_capture_endpoint(booth: CaptureBooth = Depends(get_capture_booth)) -> CaptureStateOut:
    try:
        booth.retake()
    except CaptureStateError as exc:
        raise _conflict(exc)
    return _state_out(booth)


@router.post('/confirm', response_model=CaptureStateOut)
def confirm_capture_endpoint(booth: CaptureBooth = Depends(get_capture_booth)) -> CaptureStateOut:
    try:
        booth.confirm()
    except CaptureStateError as exc:
        raise _conflict(exc)
    return _state_out(booth)


@router.post('/file', response_model=CaptureStateOut)
async def select_capture_file_endpoint(
    image: UploadFile = File(...),
    booth: CaptureBooth = Depends(get_capture_booth),
) -> CaptureStateOut:
    resource = ImageResource(
        content=await image.read(),
        filename=image.filename or 'upload',
        content_type=image.content_type or '',
    )
    try:
        accepted = await run_in_threadpool(booth.select_file, resource)
    except CaptureStateError as exc:
        raise _conflict(exc)
    if not accepted:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail='Only image files are accepted')
    return _state_out(booth)


@router.delete('', response_model=CaptureStateOut)
def cancel_capture_endpoint(booth: CaptureBooth = Depends(get_capture_booth)) -> CaptureStateOut:
    booth.cancel()
    return _state_out(booth)


@router.get('/image')
def pending_image_endpoint(booth: CaptureBooth = Depends(get_capture_booth)) -> Response:
    pending = booth.pending_image
    if pending is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='No captured image')
    return Response(
        content=pending.content,
        media_type=pending.content_type,
        headers={'Content-Disposition': f'inline; filename="{pending.filename}"'},
    )


@router.delete('/image')
def discard_pending_image_endpoint(booth: CaptureBooth = Depends(get_capture_booth)) -> dict:
    booth.clear_pending()
    return {'status': 'ok'}
