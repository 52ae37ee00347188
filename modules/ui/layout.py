"""Gradio layout composition for the tools suite."""

from __future__ import annotations

from typing import Any

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from config.settings import AppConfig
from modules.pipelines import code_editor
from modules.pipelines.documents import PDF_FONTS
from modules.pipelines.img2img import Image2ImageService
from modules.pipelines.pixel_filters import EFFECTS
from modules.pipelines.text2img import Text2ImageService
from modules.pipelines.textgen import CodeGenerationService, MusicGenerationService, TextGenerationService
from modules.pipelines.video import VideoService
from modules.prompts.templates import (
    EXTENSION_LANGUAGES,
    LENGTH_PRESETS,
    MUSIC_GENRES,
    TEXT_TYPES,
    TONES,
    template_for,
)
from modules.services.api_keys import ApiKeyStore
from modules.services.auth_service import IdentityClient
from modules.services.history_service import GenerationHistoryService
from modules.services.storage_service import StorageService
from modules.ui.callbacks import build_callbacks

HISTORY_HEADERS = ["Created", "Prompt", "URL", "Seed"]
AI_EDIT_TYPES = ["background-removal", "enhance", "upscale", "style-transfer"]
FRAMEWORKS = ["none", "react", "vue", "express", "django", "flask", "spring"]
EDITOR_FILE_TYPES = [f".{extension}" for extension in EXTENSION_LANGUAGES]


def build_app(config: AppConfig) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio is not installed; install the project dependencies first.")

    callbacks_map = build_callbacks(
        config,
        auth=IdentityClient(config),
        api_keys=ApiKeyStore(config.api_keys_path),
        history=GenerationHistoryService(config.history_path),
        storage=StorageService(config.output_dir),
        text2img=Text2ImageService(config),
        video=VideoService(config),
        image2img=Image2ImageService(config),
        text=TextGenerationService(config),
        code=CodeGenerationService(config),
        music=MusicGenerationService(config),
    )
    languages = list(config.metadata.get("available_languages", ["javascript"]))

    with gr.Blocks(title="AI Tools Suite") as demo:
        gr.Markdown("## AI Tools Suite")
        user_state = gr.State(None)

        # Account and API keys
        with gr.Tab("Account"):
            with gr.Row():
                with gr.Column():
                    email = gr.Textbox(label="Email")
                    password = gr.Textbox(label="Password", type="password")
                    confirm_password = gr.Textbox(label="Confirm password (sign up)", type="password")
                    username = gr.Textbox(label="Username (sign up)")
                    with gr.Row():
                        sign_in_btn = gr.Button("Sign in", variant="primary")
                        sign_up_btn = gr.Button("Sign up")
                        sign_out_btn = gr.Button("Sign out")
                with gr.Column():
                    runware_key = gr.Textbox(label="Runware API key", type="password")
                    huggingface_key = gr.Textbox(label="Hugging Face API key", type="password")
                    removebg_key = gr.Textbox(label="remove.bg API key", type="password")
                    with gr.Row():
                        save_keys_btn = gr.Button("Save keys")
                        load_keys_btn = gr.Button("Load saved keys")
            account_status = gr.Markdown("Not signed in.")

            sign_in_btn.click(
                fn=callbacks_map["on_sign_in"],
                inputs=[email, password],
                outputs=[user_state, account_status],
            )
            sign_up_btn.click(
                fn=callbacks_map["on_sign_up"],
                inputs=[email, password, confirm_password, username],
                outputs=[user_state, account_status],
            )
            sign_out_btn.click(
                fn=callbacks_map["on_sign_out"],
                inputs=[user_state],
                outputs=[user_state, account_status],
            )
            save_keys_btn.click(
                fn=callbacks_map["on_save_api_keys"],
                inputs=[user_state, runware_key, huggingface_key, removebg_key],
                outputs=[account_status],
            )
            load_keys_btn.click(
                fn=callbacks_map["on_load_api_keys"],
                inputs=[user_state],
                outputs=[runware_key, huggingface_key, removebg_key, account_status],
            )

        # Image generation
        with gr.Tab("Image Generation"):
            with gr.Row():
                with gr.Column():
                    image_prompt = gr.Textbox(label="Description", lines=4)
                    image_key = gr.Textbox(
                        label="Runware API key (leave blank to use the saved key)", type="password"
                    )
                    image_btn = gr.Button("Generate image", variant="primary")
                with gr.Column():
                    image_output = gr.Image(label="Result")
                    image_status = gr.Markdown("Ready.")
            image_history = gr.Dataframe(headers=HISTORY_HEADERS, label="History", interactive=False)
            image_history_btn = gr.Button("Refresh history")
            image_kind = gr.State("image")

            image_btn.click(
                fn=callbacks_map["on_generate_image"],
                inputs=[user_state, image_prompt, image_key],
                outputs=[image_output, image_history, image_status],
            )
            image_history_btn.click(
                fn=callbacks_map["on_refresh_history"],
                inputs=[user_state, image_kind],
                outputs=[image_history, image_status],
            )

        # Video generation
        with gr.Tab("Video Generation"):
            with gr.Row():
                with gr.Column():
                    video_prompt = gr.Textbox(label="Video description", lines=4)
                    video_key = gr.Textbox(
                        label="Runware API key (leave blank to use the saved key)", type="password"
                    )
                    video_btn = gr.Button("Generate video", variant="primary")
                with gr.Column():
                    video_output = gr.Video(label="Result")
                    video_status = gr.Markdown("Ready.")
            video_history = gr.Dataframe(headers=HISTORY_HEADERS, label="History", interactive=False)
            video_history_btn = gr.Button("Refresh history")
            video_kind = gr.State("video")

            video_btn.click(
                fn=callbacks_map["on_generate_video"],
                inputs=[user_state, video_prompt, video_key],
                outputs=[video_output, video_history, video_status],
            )
            video_history_btn.click(
                fn=callbacks_map["on_refresh_history"],
                inputs=[user_state, video_kind],
                outputs=[video_history, video_status],
            )

        # Image editor
        with gr.Tab("Image Editor"):
            editor_state = gr.State(None)
            with gr.Row():
                with gr.Column():
                    editor_upload = gr.Image(label="Upload image", type="pil", image_mode="RGBA")
                    brightness = gr.Slider(label="Brightness", minimum=0, maximum=200, step=1, value=100)
                    contrast = gr.Slider(label="Contrast", minimum=0, maximum=200, step=1, value=100)
                    saturation = gr.Slider(label="Saturation", minimum=0, maximum=200, step=1, value=100)
                    blur = gr.Slider(label="Blur", minimum=0, maximum=10, step=0.1, value=0)
                    rotation = gr.Slider(label="Rotation", minimum=-360, maximum=360, step=1, value=0)
                    with gr.Row():
                        flip_h = gr.Checkbox(label="Flip horizontal", value=False)
                        flip_v = gr.Checkbox(label="Flip vertical", value=False)
                    with gr.Row():
                        rotate_left_btn = gr.Button("Rotate -90°")
                        rotate_right_btn = gr.Button("Rotate +90°")
                    with gr.Row():
                        effect_select = gr.Dropdown(
                            label="Effect", choices=list(EFFECTS), value="grayscale"
                        )
                        effect_btn = gr.Button("Apply effect")
                    with gr.Row():
                        ai_edit_type = gr.Dropdown(
                            label="AI edit", choices=AI_EDIT_TYPES, value=AI_EDIT_TYPES[0]
                        )
                        ai_key = gr.Textbox(
                            label="API key (remove.bg or Hugging Face)", type="password"
                        )
                        ai_btn = gr.Button("Process with AI")
                    with gr.Row():
                        reset_btn = gr.Button("Reset")
                        flatten = gr.Checkbox(label="White background on export", value=False)
                        export_btn = gr.Button("Export PNG", variant="primary")
                with gr.Column():
                    editor_preview = gr.Image(label="Preview", type="pil", interactive=False)
                    editor_file = gr.File(label="Download")
                    editor_status = gr.Markdown("Upload an image to start editing.")

            adjust_inputs = [editor_state, brightness, contrast, saturation, blur, rotation, flip_h, flip_v]
            editor_outputs = [editor_state, editor_preview, editor_status]

            editor_upload.upload(
                fn=callbacks_map["on_editor_upload"],
                inputs=[user_state, editor_upload],
                outputs=editor_outputs,
            )
            for control in (brightness, contrast, saturation, blur, rotation):
                control.release(fn=callbacks_map["on_editor_adjust"], inputs=adjust_inputs, outputs=editor_outputs)
            for control in (flip_h, flip_v):
                control.input(fn=callbacks_map["on_editor_adjust"], inputs=adjust_inputs, outputs=editor_outputs)

            rotate_left_btn.click(
                fn=lambda editor: callbacks_map["on_editor_rotate"](editor, -90),
                inputs=[editor_state],
                outputs=[editor_state, editor_preview, rotation, editor_status],
            )
            rotate_right_btn.click(
                fn=lambda editor: callbacks_map["on_editor_rotate"](editor, 90),
                inputs=[editor_state],
                outputs=[editor_state, editor_preview, rotation, editor_status],
            )
            effect_btn.click(
                fn=callbacks_map["on_editor_effect"],
                inputs=[editor_state, effect_select],
                outputs=editor_outputs,
            )
            ai_btn.click(
                fn=callbacks_map["on_editor_ai"],
                inputs=[user_state, editor_state, ai_edit_type, ai_key],
                outputs=editor_outputs,
            )
            reset_btn.click(
                fn=callbacks_map["on_editor_reset"],
                inputs=[editor_state],
                outputs=[
                    editor_state,
                    editor_preview,
                    brightness,
                    contrast,
                    saturation,
                    blur,
                    rotation,
                    flip_h,
                    flip_v,
                    editor_status,
                ],
            )
            export_btn.click(
                fn=callbacks_map["on_editor_export"],
                inputs=[editor_state, flatten],
                outputs=[editor_file, editor_status],
            )

        # Code generation and editing
        with gr.Tab("Code"):
            with gr.Row():
                with gr.Column():
                    code_prompt = gr.Textbox(label="What should the code do?", lines=4)
                    language = gr.Dropdown(label="Language", choices=languages, value=languages[0])
                    framework = gr.Dropdown(label="Framework (optional)", choices=FRAMEWORKS, value="none")
                    code_key = gr.Textbox(
                        label="Runware API key (leave blank to use the saved key)", type="password"
                    )
                    code_btn = gr.Button("Generate code", variant="primary")
                    code_upload = gr.File(label="Open file", file_types=EDITOR_FILE_TYPES)
                with gr.Column():
                    code_filename = gr.Textbox(
                        label="File name", value=code_editor.rename_for_language("", languages[0])
                    )
                    code_output = gr.Code(label="Code", value=template_for(languages[0]), interactive=True)
                    with gr.Row():
                        format_btn = gr.Button("Format")
                        check_btn = gr.Button("Check syntax")
                        save_code_btn = gr.Button("Save file")
                    code_file = gr.File(label="Download")
                    code_status = gr.Markdown("Ready.")

            code_btn.click(
                fn=callbacks_map["on_generate_code"],
                inputs=[user_state, code_prompt, language, framework, code_key],
                outputs=[code_output, code_file, code_status],
            )
            # .input fires for user picks only, so loading a file does not reset the editor.
            language.input(
                fn=callbacks_map["on_code_language"],
                inputs=[user_state, language, code_output, code_filename],
                outputs=[code_output, code_filename, code_status],
            )
            code_upload.upload(
                fn=callbacks_map["on_code_load"],
                inputs=[user_state, code_upload, code_output, code_filename, language],
                outputs=[code_output, code_filename, language, code_status],
            )
            save_code_btn.click(
                fn=callbacks_map["on_code_save"],
                inputs=[user_state, code_output, code_filename, language],
                outputs=[code_file, code_status],
            )
            format_btn.click(
                fn=callbacks_map["on_code_format"],
                inputs=[user_state, code_output, language],
                outputs=[code_output, code_status],
            )
            check_btn.click(
                fn=callbacks_map["on_code_check"],
                inputs=[user_state, code_output, language],
                outputs=[code_status],
            )

        # Document editor
        with gr.Tab("Document"):
            selection = gr.State((0, 0))
            with gr.Row():
                with gr.Column(scale=3):
                    doc_title = gr.Textbox(label="Title", value="Untitled Document")
                    doc_content = gr.Textbox(label="Content", lines=18)
                    with gr.Row():
                        bold_btn = gr.Button("Bold")
                        italic_btn = gr.Button("Italic")
                        underline_btn = gr.Button("Underline")
                        bullet_btn = gr.Button("• List")
                        numbered_btn = gr.Button("1. List")
                with gr.Column(scale=1):
                    font_family = gr.Dropdown(
                        label="Font",
                        choices=[name.title() for name in PDF_FONTS],
                        value="Arial",
                    )
                    font_size = gr.Slider(label="Font size", minimum=8, maximum=48, step=1, value=14)
                    text_align = gr.Radio(
                        label="Alignment", choices=["left", "center", "right", "justify"], value="left"
                    )
                    doc_upload = gr.File(label="Open text file", file_types=[".txt", ".md"])
                    with gr.Row():
                        save_txt_btn = gr.Button("Save .txt")
                        save_pdf_btn = gr.Button("Export PDF")
                        save_doc_btn = gr.Button("Export Word")
                    doc_file = gr.File(label="Download")
                    doc_status = gr.Markdown("Ready.")

            def _capture_selection(content: str, evt: gr.SelectData) -> Any:
                return callbacks_map["on_doc_select"](content, evt)

            doc_content.select(fn=_capture_selection, inputs=[doc_content], outputs=[selection])

            for button, fmt in ((bold_btn, "bold"), (italic_btn, "italic"), (underline_btn, "underline")):
                button.click(
                    fn=lambda session, content, sel, fmt=fmt: callbacks_map["on_doc_format"](
                        session, content, sel, fmt
                    ),
                    inputs=[user_state, doc_content, selection],
                    outputs=[doc_content, doc_status],
                )
            for button, ordered in ((bullet_btn, False), (numbered_btn, True)):
                button.click(
                    fn=lambda session, content, sel, ordered=ordered: callbacks_map["on_doc_insert_list"](
                        session, content, sel, ordered
                    ),
                    inputs=[user_state, doc_content, selection],
                    outputs=[doc_content, doc_status],
                )
            doc_upload.upload(
                fn=callbacks_map["on_doc_load"],
                inputs=[user_state, doc_upload],
                outputs=[doc_title, doc_content, doc_status],
            )
            for button, target in ((save_txt_btn, "txt"), (save_pdf_btn, "pdf"), (save_doc_btn, "doc")):
                button.click(
                    fn=lambda *args, target=target: callbacks_map["on_doc_export"](*args, target),
                    inputs=[user_state, doc_title, doc_content, font_family, font_size, text_align],
                    outputs=[doc_file, doc_status],
                )

        # PDF tools
        with gr.Tab("PDF Tools"):
            with gr.Row():
                with gr.Column():
                    pdf_upload = gr.File(
                        label="Files", file_count="multiple", file_types=[".pdf", "image"]
                    )
                    page_range = gr.Textbox(label="Page range (split)", placeholder="1-3")
                    rotate_angle = gr.Dropdown(label="Rotation", choices=["90", "180", "270"], value="90")
                    with gr.Row():
                        split_btn = gr.Button("Split")
                        merge_btn = gr.Button("Merge")
                        rotate_btn = gr.Button("Rotate")
                        compress_btn = gr.Button("Compress")
                    with gr.Row():
                        to_images_btn = gr.Button("PDF to images")
                        to_pdf_btn = gr.Button("Images to PDF")
                with gr.Column():
                    pdf_files = gr.File(label="Results", file_count="multiple")
                    pdf_status = gr.Markdown("Ready.")

            pdf_outputs = [pdf_files, pdf_status]
            split_btn.click(
                fn=callbacks_map["on_pdf_split"], inputs=[user_state, pdf_upload, page_range], outputs=pdf_outputs
            )
            merge_btn.click(fn=callbacks_map["on_pdf_merge"], inputs=[user_state, pdf_upload], outputs=pdf_outputs)
            rotate_btn.click(
                fn=callbacks_map["on_pdf_rotate"], inputs=[user_state, pdf_upload, rotate_angle], outputs=pdf_outputs
            )
            compress_btn.click(
                fn=callbacks_map["on_pdf_compress"], inputs=[user_state, pdf_upload], outputs=pdf_outputs
            )
            to_images_btn.click(
                fn=callbacks_map["on_pdf_to_images"], inputs=[user_state, pdf_upload], outputs=pdf_outputs
            )
            to_pdf_btn.click(
                fn=callbacks_map["on_images_to_pdf"], inputs=[user_state, pdf_upload], outputs=pdf_outputs
            )

        # Text generation
        with gr.Tab("Text"):
            with gr.Row():
                with gr.Column():
                    text_prompt = gr.Textbox(label="Prompt", lines=4)
                    text_type = gr.Dropdown(label="Type", choices=TEXT_TYPES, value=TEXT_TYPES[0])
                    tone = gr.Dropdown(label="Tone", choices=TONES, value=TONES[0])
                    length = gr.Radio(label="Length", choices=list(LENGTH_PRESETS), value="medium")
                    text_key = gr.Textbox(label="Hugging Face API key", type="password")
                    text_btn = gr.Button("Generate text", variant="primary")
                with gr.Column():
                    text_output = gr.Textbox(label="Result", lines=16)
                    text_status = gr.Markdown("Ready.")

            text_btn.click(
                fn=callbacks_map["on_generate_text"],
                inputs=[text_prompt, text_type, tone, length, text_key],
                outputs=[text_output, text_status],
            )

        # Music generation
        with gr.Tab("Music"):
            with gr.Row():
                with gr.Column():
                    music_prompt = gr.Textbox(label="Describe the music", lines=4)
                    genre = gr.Dropdown(label="Genre", choices=MUSIC_GENRES, value=MUSIC_GENRES[0])
                    duration = gr.Slider(label="Duration (seconds)", minimum=5, maximum=30, step=1, value=10)
                    music_key = gr.Textbox(label="Hugging Face API key", type="password")
                    music_btn = gr.Button("Generate music", variant="primary")
                with gr.Column():
                    music_output = gr.Audio(label="Result", type="filepath")
                    music_status = gr.Markdown("Ready.")

            music_btn.click(
                fn=callbacks_map["on_generate_music"],
                inputs=[music_prompt, genre, duration, music_key],
                outputs=[music_output, music_status],
            )

    return demo
