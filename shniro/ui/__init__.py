"""NiceGUI interface - thin presentation layer over the /solve endpoint.

Responsibilities:
    - Question input with optional image upload
    - Progressive, character-by-character answer reveal
    - Rich (Markdown + math) or plain display, switchable mid-reveal
    - Dark/light theme toggle

Delegates all answering to the API.
"""
