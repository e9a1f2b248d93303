"""Gradio layout composition for the studio front-end."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence

import gradio as gr

from config.settings import AppConfig
from modules.optimization.prompt_library import PromptLibrary, load_prompt_library
from modules.pipelines.options import AppMode, AspectRatio
from modules.services.gallery import Gallery
from modules.services.relay_client import RelayClient
from modules.ui.callbacks import MODE_VIEWS, build_callbacks
from modules.utils.image_utils import data_uri_to_image


def _mode_choices() -> Sequence[tuple[str, str]]:
    return [(view.label, mode.value) for mode, view in MODE_VIEWS.items()]


def _library_choices(library: PromptLibrary) -> Sequence[tuple[str, str]]:
    choices: list[tuple[str, str]] = []
    for category in library.list_categories():
        for prompt in category.prompts:
            preview = prompt if len(prompt) <= 90 else prompt[:87] + "..."
            choices.append((f"{category.name} · {preview}", prompt))
    return choices


def _render_gallery(gallery: Optional[Gallery]) -> tuple[list[tuple[Any, str]], str]:
    images = gallery.items() if gallery is not None else []
    items = [(data_uri_to_image(image.url), image.prompt) for image in images]
    count = f"{len(images)} creations" if images else "No images yet. Start by describing an idea or pick one from the library!"
    return items, count


def _status(message: str) -> str:
    return f"⚠️ {message}" if message else ""


def build_app(config: AppConfig, client: Optional[RelayClient] = None) -> gr.Blocks:
    """Compose and return the Gradio application."""
    relay_client = client or RelayClient(config)
    library = load_prompt_library(Path(config.assets_dir) / "prompt_library.json")
    callbacks_map = build_callbacks(client=relay_client, library=library)

    default_view = MODE_VIEWS[AppMode.TEXT_TO_IMAGE]

    with gr.Blocks(title="Banana Studio") as demo:
        gr.Markdown("## Banana Studio")
        gallery_state = gr.State(Gallery())

        mode = gr.Radio(
            label="Mode",
            choices=_mode_choices(),
            value=AppMode.TEXT_TO_IMAGE.value,
        )

        with gr.Row():
            with gr.Column(scale=5):
                title = gr.Markdown(f"### {default_view.title}")
                with gr.Accordion("Prompt Library", open=False):
                    library_select = gr.Dropdown(
                        label="Select a prompt to get started",
                        choices=_library_choices(library),
                        value=None,
                    )
                    gr.Markdown("Tip: You can edit these prompts after selecting them.")

                reference_image = gr.Image(
                    label="Reference Image",
                    type="pil",
                    sources=["upload", "clipboard"],
                    visible=default_view.requires_image,
                )
                prompt = gr.Textbox(
                    label=default_view.prompt_label,
                    lines=6,
                    placeholder=default_view.placeholder,
                )
                optimize_btn = gr.Button("Optimize", size="sm", interactive=False)
                aspect_ratio = gr.Radio(
                    label="Aspect Ratio",
                    choices=[ratio.value for ratio in AspectRatio],
                    value=AspectRatio.SQUARE.value,
                )
                status = gr.Markdown("")
                generate_btn = gr.Button("Generate", variant="primary")
                tip = gr.Markdown(default_view.tip)

            with gr.Column(scale=7):
                gr.Markdown("### Gallery")
                count = gr.Markdown(_render_gallery(None)[1])
                gallery = gr.Gallery(label="Creations", columns=2, height="auto")

        def _apply_mode(selected: str):
            view = callbacks_map["on_change_mode"](selected)
            return (
                f"### {view.title}",
                gr.update(visible=view.requires_image),
                gr.update(label=view.prompt_label, placeholder=view.placeholder),
                view.tip,
                "",
            )

        def _generate(selected_mode, prompt_text, image, ratio, state):
            state, message = callbacks_map["on_generate"](selected_mode, prompt_text, image, ratio, state)
            items, count_text = _render_gallery(state)
            return state, items, count_text, _status(message)

        def _optimize(prompt_text):
            enhanced, message = callbacks_map["on_optimize_prompt"](prompt_text)
            return enhanced, _status(message)

        def _optimize_ready(prompt_text):
            return gr.update(interactive=bool((prompt_text or "").strip()), value="Optimize")

        mode.change(
            fn=_apply_mode,
            inputs=[mode],
            outputs=[title, reference_image, prompt, tip, status],
        )
        prompt.change(fn=_optimize_ready, inputs=[prompt], outputs=[optimize_btn], queue=False)
        library_select.change(
            fn=callbacks_map["on_select_library_prompt"],
            inputs=[library_select, prompt],
            outputs=[prompt],
        )

        optimize_btn.click(
            fn=lambda: gr.update(interactive=False, value="Optimizing..."),
            outputs=[optimize_btn],
            queue=False,
        ).then(
            fn=_optimize,
            inputs=[prompt],
            outputs=[prompt, status],
        ).then(
            fn=_optimize_ready,
            inputs=[prompt],
            outputs=[optimize_btn],
        )

        generate_btn.click(
            fn=lambda: (gr.update(interactive=False, value="Thinking..."), ""),
            outputs=[generate_btn, status],
            queue=False,
        ).then(
            fn=_generate,
            inputs=[mode, prompt, reference_image, aspect_ratio, gallery_state],
            outputs=[gallery_state, gallery, count, status],
        ).then(
            fn=lambda: gr.update(interactive=True, value="Generate"),
            outputs=[generate_btn],
        )

    return demo
