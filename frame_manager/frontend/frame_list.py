"""
Listing Panel - all frames newest first, with activate/deactivate and delete per row
"""
import html
import logging
import gradio as gr
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import unquote, urlparse
from .client import BackendClient, BackendError

logger = logging.getLogger(__name__)

LOADING_MESSAGE = "Loading frames..."
EMPTY_MESSAGE = "No frames uploaded yet"


def placeholder_for(frames: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    """Message shown instead of the list: None while loading, an empty list once loaded"""
    if frames is None:
        return LOADING_MESSAGE
    if not frames:
        return EMPTY_MESSAGE
    return None


def fetch_frames(client: BackendClient) -> List[Dict[str, Any]]:
    return client.select_frames()


def toggle_frame(client: BackendClient, frame_id: str, is_active: bool) -> bool:
    """Flip is_active on one frame; returns the new value"""
    new_state = not is_active
    client.update_frame(frame_id, {"is_active": new_state})
    return new_state


def storage_key_from_url(image_url: str, bucket: str) -> str:
    """
    Object key from a public URL: whatever follows the last ``/<bucket>/``
    """
    path = urlparse(image_url).path
    marker = f"/{bucket}/"
    if marker not in path:
        raise ValueError(f"Not a {bucket} bucket URL: {image_url}")
    key = unquote(path.rsplit(marker, 1)[1])
    if not key:
        raise ValueError(f"No object key in URL: {image_url}")
    return key


def delete_frame(client: BackendClient, frame_id: str, image_url: str):
    """
    Remove the stored image, then the frames row. Nothing is touched in the
    table unless the storage removal succeeded.
    """
    key = storage_key_from_url(image_url, client.bucket)
    client.remove([key])
    try:
        client.delete_frame(frame_id)
    except BackendError:
        logger.error("Frame %s still listed but its object %s is gone from storage", frame_id, key)
        raise
    logger.info("Deleted frame %s and object %s", frame_id, key)


def format_created(created_at: Optional[str]) -> str:
    if not created_at:
        return ""
    try:
        return datetime.fromisoformat(created_at).date().isoformat()
    except ValueError:
        return created_at


def thumbnail_html(frame: Dict[str, Any]) -> str:
    return (
        f'<img src="{html.escape(frame["image_url"])}" alt="{html.escape(frame["name"])}" '
        'style="width:96px;height:96px;object-fit:cover;border-radius:6px;">'
    )


def describe_frame(frame: Dict[str, Any]) -> str:
    status = "🟢 Active" if frame["is_active"] else "⚪ Inactive"
    return f"### {frame['name']}\n{format_created(frame.get('created_at'))}\n\n{status}"


class FrameListPanel:
    """
    The frames list. ``frames_state`` holds None while loading and the
    fetched list afterwards; every change to it re-renders the rows.
    """

    def __init__(self, client: BackendClient):
        self.client = client
        self.frames_state = None
        self.pending_state = None

    def reload(self) -> List[Dict[str, Any]]:
        """Fetch the full list again; the result replaces whatever was shown"""
        try:
            return fetch_frames(self.client)
        except BackendError as e:
            logger.warning("Error loading frames: %s", e)
            gr.Warning("Error loading frames")
            return []

    def toggle(self, frame_id: str, is_active: bool) -> List[Dict[str, Any]]:
        try:
            new_state = toggle_frame(self.client, frame_id, is_active)
        except BackendError:
            raise gr.Error("Error updating frame")
        gr.Info(f"Frame {'activated' if new_state else 'deactivated'}")
        return self.reload()

    def confirm_delete(self, frame_id: str, image_url: str):
        """Returns (frames, pending id) with the pending confirmation cleared"""
        try:
            delete_frame(self.client, frame_id, image_url)
        except (BackendError, ValueError):
            raise gr.Error("Error deleting frame")
        gr.Info("Frame deleted successfully")
        return self.reload(), None

    def _row(self, frame: Dict[str, Any], pending_id: Optional[str]):
        frame_id = frame["id"]
        with gr.Row(equal_height=True):
            gr.HTML(thumbnail_html(frame))
            with gr.Column(scale=3):
                gr.Markdown(describe_frame(frame))
            with gr.Column(scale=1, min_width=160):
                if pending_id == frame_id:
                    confirm_btn = gr.Button("🗑️ Confirm delete", variant="stop", size="sm")
                    cancel_btn = gr.Button("Cancel", size="sm")
                    confirm_btn.click(
                        fn=lambda: self.confirm_delete(frame_id, frame["image_url"]),
                        outputs=[self.frames_state, self.pending_state]
                    )
                    cancel_btn.click(fn=lambda: None, outputs=self.pending_state)
                else:
                    toggle_btn = gr.Button(
                        "🙈 Deactivate" if frame["is_active"] else "👁️ Activate",
                        size="sm"
                    )
                    delete_btn = gr.Button("🗑️ Delete", size="sm")
                    toggle_btn.click(
                        fn=lambda: self.toggle(frame_id, frame["is_active"]),
                        outputs=self.frames_state
                    )
                    delete_btn.click(fn=lambda: frame_id, outputs=self.pending_state)

    def create(self):
        """
        Create the frames list UI. Returns the state to feed reload() into.
        """
        self.frames_state = gr.State(None)
        self.pending_state = gr.State(None)

        @gr.render(inputs=[self.frames_state, self.pending_state])
        def render_frames(frames, pending_id):
            with gr.Group():
                placeholder = placeholder_for(frames)
                if placeholder:
                    gr.Markdown(f"*{placeholder}*")
                    return
                gr.Markdown("## 🖼️ Uploaded Frames")
                for frame in frames:
                    self._row(frame, pending_id)

        return self.frames_state
