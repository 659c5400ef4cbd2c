"""
Upload Panel - name + image, stored in the bucket and then recorded in the frames table
"""
import logging
import time
import gradio as gr
from pathlib import Path
from typing import Any, Dict, Optional
from PIL import Image
from .client import BackendClient, BackendError
from ..content_types import content_type_for

logger = logging.getLogger(__name__)

UPLOAD_LABEL = "📤 Upload Frame"
UPLOADING_LABEL = "⏳ Uploading..."

# frames.name column width
MAX_NAME_LENGTH = 255


class ValidationError(Exception):
    """Form input is missing; raised before anything is sent to the backend"""


def storage_key_for(filename: str, millis: Optional[int] = None) -> str:
    """
    Storage key for an upload: epoch milliseconds plus the original extension,
    e.g. ``1718000000000.png``
    """
    if millis is None:
        millis = time.time_ns() // 1_000_000
    extension = Path(filename).suffix.lower().lstrip(".")
    return f"{millis}.{extension}" if extension else str(millis)


def uploading_button():
    """Upload button while a submission is in flight"""
    return gr.Button(value=UPLOADING_LABEL, interactive=False)


def idle_button():
    return gr.Button(value=UPLOAD_LABEL, interactive=True)


def preview_image(image_path: Optional[str]):
    """Load the selected file for the local preview; None if it is not a readable image"""
    if not image_path:
        return None
    try:
        with Image.open(image_path) as img:
            img.load()
            return img.copy()
    except OSError as e:
        logger.info("No preview for %s: %s", image_path, e)
        return None


def upload_frame(client: BackendClient, name: Optional[str], image_path: Optional[str]) -> Dict[str, Any]:
    """
    Store the image in the frames bucket, then insert its frames row.

    The object is uploaded without overwrite, so a key that is already taken
    fails the upload (409) before anything is written.

    If the backend rejects the insert the stored object is removed again;
    when that removal fails too the object is left behind and logged as an
    orphan. If the insert never got an answer (timeout, dropped connection)
    the row may exist, so the object is kept and logged as a possible orphan.
    Returns the inserted row.
    """
    name = (name or "").strip()
    if not name or not image_path:
        raise ValidationError("Please provide both a name and an image")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Frame name must be at most {MAX_NAME_LENGTH} characters")

    path = Path(image_path)
    content = path.read_bytes()
    key = storage_key_for(path.name)

    client.upload(key, content, content_type_for(path.name), upsert=False)
    image_url = client.get_public_url(key)

    try:
        row = client.insert_frame({
            "name": name,
            "image_url": image_url,
            "is_active": True
        })
    except BackendError as e:
        if e.status_code is None:
            logger.error("Insert for stored object %s got no response; possible orphan, keeping it", key)
            raise
        try:
            client.remove([key])
            logger.info("Rolled back stored object %s after failed insert", key)
        except BackendError as rollback_error:
            logger.error("Orphaned storage object %s (no frames row): %s", key, rollback_error)
        raise

    logger.info("Uploaded frame %s as %s", row.get("id"), key)
    return row


def submit_upload(client: BackendClient, name: str, image_path: Optional[str]):
    """
    Gradio handler for the upload button.
    Returns cleared (name, file, preview) on success; raises gr.Error otherwise.
    """
    try:
        upload_frame(client, name, image_path)
    except ValidationError as e:
        raise gr.Error(str(e))
    except BackendError as e:
        raise gr.Error(e.message or "Error uploading frame")
    except OSError as e:
        raise gr.Error(f"Could not read the selected file: {e}")

    gr.Info("Frame uploaded successfully")
    return "", None, None


def create_upload_panel(client: BackendClient):
    """
    Create the Upload panel UI.

    Returns the upload event so the caller can chain work that must only
    run after a successful upload (``.success(...)``).
    """
    with gr.Group():
        gr.Markdown("## 📤 Upload New Frame")

        with gr.Row():
            with gr.Column(scale=1):
                frame_name = gr.Textbox(
                    label="Frame Name",
                    placeholder="e.g., Campaign Frame 2024",
                    value=""
                )
                frame_file = gr.File(
                    label="Frame Image",
                    file_types=["image"],
                    file_count="single",
                    type="filepath"
                )
                upload_btn = gr.Button(UPLOAD_LABEL, variant="primary", size="lg")

            with gr.Column(scale=1):
                frame_preview = gr.Image(
                    label="Preview",
                    type="pil",
                    interactive=False
                )

    frame_file.change(fn=preview_image, inputs=frame_file, outputs=frame_preview)

    def on_submit(name, image_path):
        return submit_upload(client, name, image_path)

    # idle -> submitting: the button stays disabled until the upload resolves
    upload_event = upload_btn.click(
        fn=uploading_button,
        outputs=upload_btn
    ).then(
        fn=on_submit,
        inputs=[frame_name, frame_file],
        outputs=[frame_name, frame_file, frame_preview]
    )
    upload_event.then(
        fn=idle_button,
        outputs=upload_btn
    )
    return upload_event
