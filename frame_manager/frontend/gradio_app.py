#!/usr/bin/env python3
"""
Gradio admin UI for the Frame Manager
Upload frames, list them, switch them on and off, delete them
"""

import logging
import gradio as gr
from typing import Optional
from .client import BackendClient, check_backend_status
from .config import API_URL, ADMIN_USERNAME, ADMIN_PASSWORD, SERVER_PORT
from .frame_list import FrameListPanel
from .upload_tab import create_upload_panel


def create_app(client: Optional[BackendClient] = None) -> gr.Blocks:
    """Build the admin page: header, upload panel, frames list"""
    client = client or BackendClient()
    frame_list = FrameListPanel(client)

    with gr.Blocks(title="Frame Manager", theme=gr.themes.Soft()) as app:
        # Header with title, backend status and sign out side by side
        with gr.Row():
            with gr.Column(scale=3):
                gr.Markdown("# 🖼️ Frame Manager")
            with gr.Column(scale=1):
                status_output = gr.Textbox(label="Backend Status", interactive=False, value="Not checked yet")
                with gr.Row():
                    status_btn = gr.Button("🔍 Check Backend Status", size="sm")
                    gr.Button("🚪 Sign Out", link="/logout", size="sm")

        status_btn.click(fn=lambda: check_backend_status(client), outputs=status_output)

        upload_event = create_upload_panel(client)
        frames_state = frame_list.create()

        # A successful upload invalidates the list and loads it again from the backend
        upload_event.success(fn=frame_list.reload, outputs=frames_state)
        app.load(fn=frame_list.reload, outputs=frames_state)

    return app


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    auth = (ADMIN_USERNAME, ADMIN_PASSWORD) if ADMIN_USERNAME and ADMIN_PASSWORD else None

    print("🚀 Starting Frame Manager admin UI...")
    print(f"🔗 Backend API: {API_URL}")
    if auth is None:
        print("⚠️  ADMIN_USERNAME/ADMIN_PASSWORD not set, login is disabled")

    create_app().launch(
        server_name="0.0.0.0",
        server_port=SERVER_PORT,
        share=False,
        show_error=True,
        auth=auth
    )


if __name__ == "__main__":
    main()
