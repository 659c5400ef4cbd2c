"""
FastAPI service backing the Frame Manager: a storage bucket API and a
table API for the frames collection
"""

import logging
import os
from fastapi import FastAPI, UploadFile, File, Depends, Header, HTTPException, Query, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

from .database import get_db, init_db
from .models import Frame
from .schemas import (
    FrameCreate,
    FrameUpdate,
    FrameResponse,
    RemoveObjectsRequest,
    RemoveObjectsResponse,
    UploadObjectResponse
)
from ..content_types import content_type_for
from .storage import LocalStorage, S3Storage

logger = logging.getLogger(__name__)

# Configuration
USE_LOCAL_STORAGE = os.getenv("USE_LOCAL_STORAGE", "true").lower() == "true"
LOCAL_STORAGE_DIR = os.getenv("LOCAL_STORAGE_DIR", "storage")
STORAGE_BUCKETS = {b.strip() for b in os.getenv("STORAGE_BUCKETS", "frames").split(",") if b.strip()}
API_KEY = os.getenv("API_KEY")

app = FastAPI(
    title="Frame Manager Backend",
    description="Storage buckets and the frames table for the Frame Manager admin UI",
    version="1.0.0"
)

storage = LocalStorage(LOCAL_STORAGE_DIR) if USE_LOCAL_STORAGE else S3Storage()


def get_storage():
    return storage


def verify_api_key(apikey: Optional[str] = Header(None)):
    if API_KEY and apikey != API_KEY:
        raise HTTPException(status_code=401, detail="Invalid API key")


def _check_bucket(bucket: str):
    if bucket not in STORAGE_BUCKETS:
        raise HTTPException(status_code=404, detail=f"Bucket '{bucket}' not found")


def _check_key(key: str):
    if not key or key in (".", "..") or "/" in key or "\\" in key:
        raise HTTPException(status_code=400, detail=f"Invalid object key: {key!r}")


def _get_frame_or_404(db: Session, frame_id: str) -> Frame:
    frame = db.query(Frame).filter(Frame.id == frame_id).first()
    if not frame:
        raise HTTPException(status_code=404, detail=f"Frame {frame_id} not found")
    return frame


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup"""
    init_db()
    logger.info("Frame Manager backend is running (storage: %s)", "local" if USE_LOCAL_STORAGE else "s3")


@app.get("/")
async def root():
    """Root endpoint - redirect to docs"""
    return RedirectResponse(url="/docs")


# ---------- Storage ----------

@app.post(
    "/storage/v1/object/{bucket}/{key}",
    response_model=UploadObjectResponse,
    dependencies=[Depends(verify_api_key)],
    tags=["Storage"]
)
async def upload_object(
    bucket: str,
    key: str,
    file: UploadFile = File(..., description="Object content"),
    x_upsert: Optional[str] = Header(None),
    store=Depends(get_storage)
):
    """
    Store an object under bucket/key. An existing object with the same key
    is overwritten (last write wins) unless the request sends
    ``x-upsert: false``, in which case it is left alone and 409 returned.
    """
    _check_bucket(bucket)
    _check_key(key)
    upsert = x_upsert is None or x_upsert.lower() != "false"
    try:
        exists = store.exists(bucket, key)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}")
    if exists and not upsert:
        raise HTTPException(status_code=409, detail=f"Object {bucket}/{key} already exists")
    try:
        content = await file.read()
        if exists:
            logger.warning("Overwriting existing object %s/%s", bucket, key)
        store.put(bucket, key, content, file.content_type or content_type_for(key))
        return UploadObjectResponse(Key=f"{bucket}/{key}")
    except Exception as e:
        logger.exception("Upload of %s/%s failed", bucket, key)
        raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}")


@app.get("/storage/v1/object/public/{bucket}/{key}", tags=["Storage"])
async def get_public_object(bucket: str, key: str, store=Depends(get_storage)):
    """Serve an object's bytes; this is what a frame's image_url points at"""
    _check_bucket(bucket)
    _check_key(key)
    try:
        found = store.get(bucket, key)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Download failed: {str(e)}")
    if found is None:
        raise HTTPException(status_code=404, detail=f"Object {bucket}/{key} not found")
    content, content_type = found
    return Response(content=content, media_type=content_type)


@app.delete(
    "/storage/v1/object/{bucket}",
    response_model=RemoveObjectsResponse,
    dependencies=[Depends(verify_api_key)],
    tags=["Storage"]
)
async def remove_objects(bucket: str, request: RemoveObjectsRequest, store=Depends(get_storage)):
    """
    Remove objects by key. Keys that do not exist are skipped and left out
    of the returned list.
    """
    _check_bucket(bucket)
    for key in request.prefixes:
        _check_key(key)
    try:
        removed = [key for key in request.prefixes if store.delete(bucket, key)]
        return RemoveObjectsResponse(removed=removed)
    except Exception as e:
        logger.exception("Removal from %s failed", bucket)
        raise HTTPException(status_code=500, detail=f"Remove failed: {str(e)}")


# ---------- Frames table ----------

@app.get(
    "/rest/v1/frames",
    response_model=List[FrameResponse],
    dependencies=[Depends(verify_api_key)],
    tags=["Frames"]
)
async def select_frames(
    order: str = Query("created_at.desc", pattern=r"^created_at\.(asc|desc)$", description="Sort order"),
    db: Session = Depends(get_db)
):
    """List every frame ordered by creation time"""
    try:
        column = Frame.created_at.desc() if order.endswith(".desc") else Frame.created_at.asc()
        frames = db.query(Frame).order_by(column).all()
        return [FrameResponse.model_validate(frame) for frame in frames]
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Select failed: {str(e)}")


@app.post(
    "/rest/v1/frames",
    response_model=FrameResponse,
    status_code=201,
    dependencies=[Depends(verify_api_key)],
    tags=["Frames"]
)
async def insert_frame(row: FrameCreate, db: Session = Depends(get_db)):
    """Insert a frame row"""
    try:
        frame = Frame(name=row.name, image_url=row.image_url, is_active=row.is_active)
        db.add(frame)
        db.commit()
        db.refresh(frame)
        logger.info("Inserted frame %s (%s)", frame.id, frame.name)
        return FrameResponse.model_validate(frame)
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Insert failed: {str(e)}")


@app.patch(
    "/rest/v1/frames/{frame_id}",
    response_model=FrameResponse,
    dependencies=[Depends(verify_api_key)],
    tags=["Frames"]
)
async def update_frame(frame_id: str, update: FrameUpdate, db: Session = Depends(get_db)):
    """Apply a partial update to one frame"""
    fields = update.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    if any(value is None for value in fields.values()):
        raise HTTPException(status_code=400, detail="Fields cannot be set to null")
    try:
        frame = _get_frame_or_404(db, frame_id)
        for field, value in fields.items():
            setattr(frame, field, value)
        db.commit()
        db.refresh(frame)
        return FrameResponse.model_validate(frame)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Update failed: {str(e)}")


@app.delete(
    "/rest/v1/frames/{frame_id}",
    status_code=204,
    dependencies=[Depends(verify_api_key)],
    tags=["Frames"]
)
async def delete_frame(frame_id: str, db: Session = Depends(get_db)):
    """Delete one frame row; the stored image is not touched"""
    try:
        frame = _get_frame_or_404(db, frame_id)
        db.delete(frame)
        db.commit()
        logger.info("Deleted frame %s", frame_id)
        return Response(status_code=204)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Delete failed: {str(e)}")


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "Frame Manager Backend",
        "version": "1.0.0"
    }
