from feishu_md.services.transcoder import MarkdownRenderer, RenderOptions, RenderResult

__all__ = ["MarkdownRenderer", "RenderOptions", "RenderResult"]
