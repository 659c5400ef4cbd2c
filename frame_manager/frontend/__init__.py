"""Gradio admin UI for frames"""
