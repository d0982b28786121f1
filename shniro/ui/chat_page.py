"""NiceGUI single-page client with progressive answer reveal."""

import html
import os
import uuid

from nicegui import app, events, ui

from shniro.models.schemas import THINKING_MESSAGE
from shniro.ui.client import ImageUpload, request_answer
from shniro.ui.render import DisplayMode, Frame, RevealController

REVEAL_TICK_SECONDS = int(os.getenv("REVEAL_INTERVAL_MS", "10")) / 1000

KATEX_VERSION = "0.16.11"

HEAD_HTML = f"""
<link rel="stylesheet"
      href="https://cdn.jsdelivr.net/npm/katex@{KATEX_VERSION}/dist/katex.min.css">
<script defer
        src="https://cdn.jsdelivr.net/npm/katex@{KATEX_VERSION}/dist/katex.min.js"></script>
<script>
  function shniroRenderMath(root) {{
    if (!root || typeof katex === "undefined") return;
    root.querySelectorAll(".math").forEach(el => {{
      try {{
        katex.render(el.textContent, el, {{
          displayMode: el.classList.contains("math-display"),
          throwOnError: false,
        }});
      }} catch (e) {{
        console.warn("Math render error:", e);
      }}
    }});
  }}
</script>
<style>
  .answer-box {{ min-height: 12rem; max-height: 60vh; overflow-y: auto; }}
  .answer-plain {{ white-space: pre-wrap; }}
</style>
"""


@ui.page("/")
def chat_page() -> None:
    """Main question page."""
    ui.add_head_html(HEAD_HTML)
    dark = ui.dark_mode().bind_value(app.storage.user, "dark_mode")
    session_id = str(uuid.uuid4())
    uploaded: dict[str, ImageUpload | None] = {"image": None}

    answer_html: ui.html
    rich_switch: ui.switch

    def current_mode() -> DisplayMode:
        return DisplayMode.RICH if rich_switch.value else DisplayMode.PLAIN

    def show_frame(frame: Frame) -> None:
        if frame.mode is DisplayMode.RICH:
            answer_html.set_content(frame.content)
            answer_html.client.run_javascript(
                f"shniroRenderMath(getHtmlElement({answer_html.id}))"
            )
        else:
            escaped = html.escape(frame.content)
            answer_html.set_content(f'<div class="answer-plain">{escaped}</div>')
        answer_html.client.run_javascript(
            f"const el = getHtmlElement({answer_html.id}); el.scrollTop = el.scrollHeight;"
        )

    def show_message(message: str) -> None:
        answer_html.set_content(f"<span>{html.escape(message)}</span>")

    reveals = RevealController(show_frame, current_mode, tick=REVEAL_TICK_SECONDS)

    async def handle_upload(e: events.UploadEventArguments) -> None:
        uploaded["image"] = ImageUpload(
            name=e.file.name,
            content=await e.file.read(),
            mime_type=e.file.content_type,
        )
        upload_status.set_text(f"✅ {e.file.name}")

    async def solve() -> None:
        await reveals.cancel()
        prompt = prompt_input.value or ""
        image = uploaded["image"]
        if not prompt.strip() and image is None:
            reply = await request_answer(prompt)
            show_message(reply.text)
            return

        show_message(THINKING_MESSAGE)
        solve_btn.disable()
        try:
            reply = await request_answer(prompt, image, session_id)
        finally:
            solve_btn.enable()

        if reply.ok:
            answer_html.set_content("")
            await reveals.start(reply.text)
        else:
            show_message(reply.text)

    # === UI Layout ===
    with ui.column().classes("w-full max-w-3xl mx-auto p-4 gap-4"):
        with ui.row().classes("w-full items-center justify-between"):
            ui.label("Shniro AI").classes("text-2xl font-semibold")
            with ui.row().classes("items-center gap-2"):
                rich_switch = ui.switch("Rich rendering", value=True)
                ui.button(icon="contrast", on_click=dark.toggle).props("flat round")

        prompt_input = (
            ui.textarea(placeholder="Ask a question...")
            .props("autogrow outlined")
            .classes("w-full")
        )

        with ui.row().classes("w-full items-center gap-3"):
            ui.upload(
                label="Image",
                on_upload=handle_upload,
                auto_upload=True,
                max_files=1,
            ).props('accept="image/*" flat')
            upload_status = ui.label("").classes("text-sm text-gray-500")
            solve_btn = ui.button("Solve", icon="send", on_click=solve)

        with ui.card().classes("w-full answer-box"):
            answer_html = ui.html("", sanitize=False).classes("w-full")
