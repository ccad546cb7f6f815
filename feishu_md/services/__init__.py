from .api_counter import ApiCallCounter
from .auth_service import AuthError, AuthService
from .block_model import Block, BlockTree, BlockType, MissingRootError, RendererError
from .document_service import DocumentInfo, DocumentService, WikiNode
from .feishu_client import FeishuApiError, FeishuClient
from .file_writer import FileWriter
from .html_bridge import markdown_to_html
from .media_downloader import MediaDownloader
from .media_tokens import FileToken, MediaTokenCollector, replace_file_tokens
from .path_sanitizer import markdown_filename, sanitize_filename
from .table_renderer import TableRenderer
from .text_buffer import TextBuffer
from .transcoder import (
    DocxTranscoder,
    MarkdownRenderer,
    RenderOptions,
    RenderResult,
    TranscodeResult,
)

__all__ = [
    "ApiCallCounter",
    "AuthError",
    "AuthService",
    "Block",
    "BlockTree",
    "BlockType",
    "DocumentInfo",
    "DocumentService",
    "DocxTranscoder",
    "FeishuApiError",
    "FeishuClient",
    "FileToken",
    "FileWriter",
    "MarkdownRenderer",
    "MediaDownloader",
    "MediaTokenCollector",
    "MissingRootError",
    "RenderOptions",
    "RenderResult",
    "RendererError",
    "TableRenderer",
    "TextBuffer",
    "TranscodeResult",
    "WikiNode",
    "markdown_filename",
    "markdown_to_html",
    "replace_file_tokens",
    "sanitize_filename",
]
